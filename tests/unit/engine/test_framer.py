"""Tests for splitting the inbound stream into lines."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from phantcli.engine.framer import LineFramer


class TestLineFramer:
    def test_single_line(self) -> None:
        framer = LineFramer()
        assert framer.feed(b"11\n") == ["11"]

    def test_several_lines_in_one_chunk(self) -> None:
        framer = LineFramer()
        assert framer.feed(b"11\nhello\n10\n") == ["11", "hello", "10"]

    def test_partial_line_is_retained(self) -> None:
        framer = LineFramer()
        assert framer.feed(b"hel") == []
        assert framer.pending == b"hel"
        assert framer.feed(b"lo\nwor") == ["hello"]
        assert framer.pending == b"wor"

    def test_empty_line(self) -> None:
        framer = LineFramer()
        assert framer.feed(b"\n\n") == ["", ""]

    def test_empty_read_ends_stream(self) -> None:
        framer = LineFramer()
        framer.feed(b"partial")
        assert framer.feed(b"") == []
        assert framer.ended
        assert framer.end_reason == "end of stream"

    def test_no_lines_after_end(self) -> None:
        framer = LineFramer()
        framer.feed(b"")
        assert framer.feed(b"11\n") == []

    def test_error_ends_stream(self) -> None:
        framer = LineFramer()
        framer.fail(ConnectionResetError("reset by peer"))
        assert framer.ended
        assert framer.end_reason is not None
        assert "reset by peer" in framer.end_reason

    def test_first_end_reason_wins(self) -> None:
        framer = LineFramer()
        framer.feed(b"")
        framer.fail(OSError("late"))
        assert framer.end_reason == "end of stream"

    def test_invalid_utf8_is_replaced(self) -> None:
        framer = LineFramer()
        assert framer.feed(b"a\xffb\n") == ["a\ufffdb"]

    @given(
        st.lists(st.text(alphabet="abc 123", max_size=10), max_size=10),
        st.data(),
    )
    @settings(max_examples=100)
    def test_chunking_does_not_matter(self, lines: list[str], data: st.DataObject) -> None:
        """Lines come out the same however the stream is split."""
        stream = "".join(f"{line}\n" for line in lines).encode()
        cuts = sorted(
            data.draw(
                st.lists(st.integers(min_value=0, max_value=len(stream)), max_size=8)
            )
        )
        framer = LineFramer()
        out: list[str] = []
        start = 0
        for cut in cuts + [len(stream)]:
            chunk = stream[start:cut]
            start = cut
            if chunk:
                out.extend(framer.feed(chunk))
        assert out == lines
        assert framer.pending == b""
