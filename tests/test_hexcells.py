import pytest

from protodeck.hexcells import (
    HexTextMode,
    Utf8Cell,
    ascii_cell,
    clamp_scroll,
    hex_cell,
    row_count,
    row_label,
    utf8_cell,
)


def test_hex_mode_labels_and_toggle():
    assert HexTextMode.ASCII.label() == "ASCII"
    assert HexTextMode.UNICODE.label() == "Unicode"
    assert HexTextMode.ASCII.toggle() is HexTextMode.UNICODE
    for mode in HexTextMode:
        assert mode.toggle().toggle() is mode


def test_hex_cell_format():
    assert hex_cell(0x00) == "00 "
    assert hex_cell(0xAB) == "AB "
    for b in range(256):
        cell = hex_cell(b)
        assert len(cell) == 3 and cell.endswith(" ")
        assert int(cell[:2], 16) == b
        assert cell[:2] == cell[:2].upper()


def test_hex_cell_rejects_out_of_range():
    with pytest.raises(ValueError):
        hex_cell(256)
    with pytest.raises(ValueError):
        ascii_cell(-1)


def test_ascii_cell():
    assert ascii_cell(0x41) == "A"
    assert ascii_cell(0x20) == " "
    assert ascii_cell(0x7E) == "~"
    for b in list(range(0x20)) + list(range(0x7F, 0x100)):
        assert ascii_cell(b) == "."


def test_utf8_ascii_byte_is_static():
    data = b"Hi\x01"
    assert utf8_cell(data, 0) == Utf8Cell.static("H")
    assert utf8_cell(data, 2) == Utf8Cell.static(".")


def test_utf8_two_byte_char():
    data = "é".encode()
    assert utf8_cell(data, 0) == Utf8Cell.char("é")
    assert utf8_cell(data, 1) == Utf8Cell.placeholder()
    assert utf8_cell(data, 1).is_placeholder


def test_utf8_four_byte_char():
    ch = "\U0001F600"
    data = b"a" + ch.encode() + b"b"
    assert utf8_cell(data, 1) == Utf8Cell.char(ch)
    for i in range(2, 5):
        assert utf8_cell(data, i).is_placeholder
    assert utf8_cell(data, 5) == Utf8Cell.static("b")


def test_utf8_truncated_sequence_falls_back():
    data = b"a\xc3"
    assert utf8_cell(data, 1) == Utf8Cell.static(".")


def test_utf8_lone_continuation_byte():
    data = b"\x80\x80"
    assert utf8_cell(data, 0) == Utf8Cell.static(".")
    assert utf8_cell(data, 1) == Utf8Cell.static(".")


def test_utf8_control_char_shows_dot():
    data = "\u0085".encode()
    assert utf8_cell(data, 0) == Utf8Cell.static(".")
    assert utf8_cell(data, 1) == Utf8Cell.static(".")


def test_utf8_invalid_encodings_fall_back():
    for data in (b"\xc0\x80", b"\xed\xa0\x80"):
        for i in range(len(data)):
            assert utf8_cell(data, i) == Utf8Cell.static(".")


def test_row_count():
    assert row_count(0) == 0
    assert row_count(16) == 1
    assert row_count(17) == 2
    for n in range(1, 100):
        rows = row_count(n)
        assert (rows - 1) * 16 < n <= rows * 16


def test_row_label():
    assert row_label(0) == "00000"
    assert row_label(1) == "00010"
    assert int(row_label(0x123), 16) == 0x1230


def test_clamp_scroll_empty():
    assert clamp_scroll(5, 0, 300.0) == (0, 0)


def test_clamp_scroll_fits_in_viewport():
    assert clamp_scroll(3, 4, 500.0) == (0, 0)


def test_clamp_scroll_within_range_keeps_row():
    row, top = clamp_scroll(10, 100, 200.0)
    assert row == 10
    assert top == 10 * 20


def test_clamp_scroll_caps_at_bottom():
    total, client = 100, 200.0
    row, top = clamp_scroll(99, total, client)
    assert top == int(total * 20 - client)
    assert row * 20 <= top < (row + 1) * 20
    assert clamp_scroll(1000, total, client) == (row, top)