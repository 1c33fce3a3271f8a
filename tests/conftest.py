"""Shared fixtures for engine tests."""

from __future__ import annotations

import pytest

from phantcli.engine.protocol_engine import ProtocolEngine
from phantcli.engine.types import EngineConfig

from helpers import FIXED_TIME


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(clock=lambda: FIXED_TIME)


@pytest.fixture
def engine(config: EngineConfig) -> ProtocolEngine:
    return ProtocolEngine(cookie=12345, config=config)


@pytest.fixture
def phant5_engine() -> ProtocolEngine:
    return ProtocolEngine(
        cookie=12345, config=EngineConfig(phantasia5=True, clock=lambda: FIXED_TIME)
    )
