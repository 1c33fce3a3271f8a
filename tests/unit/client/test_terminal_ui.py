"""Tests for the terminal view state."""

from __future__ import annotations

import pytest
from blessed import Terminal

from phantcli.client.terminal_ui import MSG_ROWS, TerminalUI, format_stat
from phantcli.common.protocol import PacketType
from phantcli.engine.events import (
    ChatMessage,
    ChatToggled,
    ClearText,
    ConnectionEnded,
    DialogReady,
    PromptReady,
    SpecialTextBlock,
    StatChanged,
    TextLine,
)
from phantcli.engine.types import DialogMode


@pytest.fixture
def ui() -> TerminalUI:
    return TerminalUI(Terminal(force_styling=None))


class TestFormatStat:
    def test_scalar(self) -> None:
        assert format_stat(PacketType.GOLD, 250) == "250"

    def test_flag(self) -> None:
        assert format_stat(PacketType.RING, True) == "Yes"
        assert format_stat(PacketType.RING, False) == "No"

    def test_pair(self) -> None:
        assert format_stat(PacketType.STRENGTH, (40, 45)) == "40 (45)"

    def test_energy_with_drain(self) -> None:
        assert format_stat(PacketType.ENERGY, (90, 100, 5)) == "90 (100) 5"

    def test_energy_without_drain(self) -> None:
        assert format_stat(PacketType.ENERGY, (90, 100, 0)) == "90 (100)"

    def test_single_mana(self) -> None:
        assert format_stat(PacketType.MANA, (17,)) == "17"


class TestHandleEvent:
    def test_message_area_is_bounded(self, ui: TerminalUI) -> None:
        for i in range(MSG_ROWS + 2):
            ui.handle_event(TextLine(f"line {i}"))
        assert len(ui.messages) == MSG_ROWS
        assert ui.messages[-1] == f"line {MSG_ROWS + 1}"
        ui.handle_event(ClearText())
        assert not ui.messages

    def test_prompt_replaces_dialog(self, ui: TerminalUI) -> None:
        ui.handle_event(DialogReady(DialogMode.BUTTONS, ((0, "Fight"),)))
        ui.input_buffer = "stale"
        ui.handle_event(PromptReady(DialogMode.STRING, "Name?"))
        assert ui.dialog is None
        assert ui.prompt is not None
        assert ui.input_buffer == ""

    def test_special_text_pages(self, ui: TerminalUI) -> None:
        ui.handle_event(SpecialTextBlock(tuple(f"row {i}" for i in range(MSG_ROWS + 1))))
        assert ui.paging
        ui.next_page()
        assert list(ui.pager) == [f"row {MSG_ROWS}"]
        ui.next_page()
        assert not ui.paging

    def test_stats(self, ui: TerminalUI) -> None:
        ui.handle_event(StatChanged(PacketType.NAME, "Merlin"))
        ui.handle_event(StatChanged(PacketType.LOCATION, ("The Moors", 3, -4)))
        ui.handle_event(StatChanged(PacketType.GOLD, 12))
        assert ui.player_name == "Merlin"
        assert ui.stats[PacketType.GOLD] == "12"
        assert ui._location_line() == "Merlin is in The Moors (-4, 3)"

    def test_chat(self, ui: TerminalUI) -> None:
        ui.handle_event(ChatToggled(True))
        ui.chat_mode = True
        ui.handle_event(ChatMessage("<A> hi"))
        assert list(ui.chat_lines) == ["<A> hi"]
        ui.handle_event(ChatToggled(False))
        assert not ui.chat_enabled
        assert not ui.chat_mode

    def test_disconnect_status(self, ui: TerminalUI) -> None:
        ui.handle_event(ConnectionEnded("end of stream"))
        assert ui.status == "Disconnected: end of stream"


class TestRender:
    def test_buttons_line(self, ui: TerminalUI, capsys: pytest.CaptureFixture[str]) -> None:
        ui.handle_event(DialogReady(DialogMode.BUTTONS, ((0, "Fight"), (2, "Run"))))
        ui.render(DialogMode.BUTTONS)
        assert "1=Fight 3=Run > " in capsys.readouterr().out

    def test_more_prompt(self, ui: TerminalUI, capsys: pytest.CaptureFixture[str]) -> None:
        ui.handle_event(DialogReady(DialogMode.BUTTONS, ((0, "More"),), more_prompt=True))
        ui.render(DialogMode.BUTTONS)
        assert "--More--" in capsys.readouterr().out

    def test_password_is_masked(self, ui: TerminalUI, capsys: pytest.CaptureFixture[str]) -> None:
        ui.handle_event(PromptReady(DialogMode.PASSWORD, "Password:"))
        ui.input_buffer = "secret"
        ui.render(DialogMode.PASSWORD)
        out = capsys.readouterr().out
        assert "> ******" in out
        assert "secret" not in out
