import pytest

from metalens.analyzers.hexview import hex_stream, parse_hex_rows, render_hex


def test_single_short_row_is_padded():
    rows = render_hex(b"AB\x00")
    assert len(rows) == 1
    row = rows[0]
    assert row.offset == "00000000"
    assert row.hex == "41 42 00".ljust(47)
    assert row.ascii == "AB."


def test_rows_use_absolute_offsets():
    data = bytes(range(64))
    rows = render_hex(data, start=16, length=32)
    assert [row.offset for row in rows] == ["00000010", "00000020"]
    assert rows[0].hex.startswith("10 11 12")


def test_cap_limits_rendered_bytes():
    rows = render_hex(b"\xff" * 100, cap=20)
    assert len(rows) == 2
    assert parse_hex_rows(rows) == b"\xff" * 20


def test_length_beyond_buffer_is_clamped():
    rows = render_hex(b"hello", length=1000)
    assert parse_hex_rows(rows) == b"hello"


def test_empty_range_renders_nothing():
    assert render_hex(b"") == []
    assert render_hex(b"abc", start=10) == []


def test_negative_start_rejected():
    with pytest.raises(ValueError):
        render_hex(b"abc", start=-1)


def test_hex_stream_is_lowercase():
    assert hex_stream(b"\xab\xcd") == "abcd"
