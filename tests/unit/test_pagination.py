"""Tests for opaque cursor encoding."""

from src.fx_common.pagination import (
    cursor_decode,
    cursor_decode_int,
    cursor_decode_str,
    cursor_encode,
)


class TestCursor:
    def test_int_cursor(self) -> None:
        assert cursor_decode_int(cursor_encode(42)) == 42
        assert cursor_decode_str(cursor_encode(42)) is None

    def test_str_cursor(self) -> None:
        cursor = cursor_encode("TRX-20250926-2202-7")
        assert cursor_decode_str(cursor) == "TRX-20250926-2202-7"
        assert cursor_decode_int(cursor) is None

    def test_none_and_garbage(self) -> None:
        assert cursor_decode(None) is None
        assert cursor_decode("not-base64!!") is None
        assert cursor_decode(cursor_encode(1)[:-2] + "@@") is None

    def test_opaque(self) -> None:
        assert "42" not in cursor_encode(42)
