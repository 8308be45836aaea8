"""Cell text and row geometry for the hex dump view."""

from __future__ import annotations

import enum
import math
import unicodedata
from dataclasses import dataclass

BYTES_PER_ROW = 16
ROW_HEIGHT_PX = 20.0

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1

_HEX_CELLS = tuple(f"{b:02X} " for b in range(256))
_ASCII_CELLS = tuple(chr(b) if 0x20 <= b <= 0x7E else "." for b in range(256))


class HexTextMode(enum.Enum):
    """How the text column beside the hex bytes is rendered."""

    ASCII = "ascii"
    UNICODE = "unicode"

    def label(self) -> str:
        return "ASCII" if self is HexTextMode.ASCII else "Unicode"

    def toggle(self) -> HexTextMode:
        return HexTextMode.UNICODE if self is HexTextMode.ASCII else HexTextMode.ASCII


@dataclass(frozen=True)
class Utf8Cell:
    """Text shown for one byte in Unicode mode.

    A multi-byte character is shown on its lead byte; its continuation bytes
    are placeholders with no text of their own.
    """

    class Kind(enum.Enum):
        STATIC = "static"
        CHAR = "char"
        PLACEHOLDER = "placeholder"

    kind: Utf8Cell.Kind
    text: str = ""

    @classmethod
    def static(cls, text: str) -> Utf8Cell:
        return cls(cls.Kind.STATIC, text)

    @classmethod
    def char(cls, ch: str) -> Utf8Cell:
        return cls(cls.Kind.CHAR, ch)

    @classmethod
    def placeholder(cls) -> Utf8Cell:
        return cls(cls.Kind.PLACEHOLDER)

    @property
    def is_placeholder(self) -> bool:
        return self.kind is Utf8Cell.Kind.PLACEHOLDER


def _check_byte(byte: int) -> int:
    if not 0 <= byte <= 0xFF:
        raise ValueError(f"byte out of range: {byte}")
    return byte


def hex_cell(byte: int) -> str:
    """Two upper-case hex digits followed by a space."""
    return _HEX_CELLS[_check_byte(byte)]


def ascii_cell(byte: int) -> str:
    """The printable ASCII character for ``byte``, or '.'."""
    return _ASCII_CELLS[_check_byte(byte)]


def _sequence_len(lead: int) -> int | None:
    if lead & 0xE0 == 0xC0:
        return 2
    if lead & 0xF0 == 0xE0:
        return 3
    if lead & 0xF8 == 0xF0:
        return 4
    return None


def utf8_cell(data: bytes, index: int) -> Utf8Cell:
    """The Unicode-mode cell for ``data[index]``."""
    byte = data[index]
    if byte < 0x80:
        return Utf8Cell.static(ascii_cell(byte))

    for lead_idx in range(index, max(index - 3, 0) - 1, -1):
        expected_len = _sequence_len(data[lead_idx])
        if expected_len is None:
            continue
        end = lead_idx + expected_len
        if index >= end or end > len(data):
            continue
        chunk = data[lead_idx:end]
        if any(b & 0xC0 != 0x80 for b in chunk[1:]):
            continue
        try:
            text = bytes(chunk).decode("utf-8")
        except UnicodeDecodeError:
            continue
        if not text:
            continue
        ch = text[0]
        if unicodedata.category(ch) == "Cc":
            return Utf8Cell.static(".")
        if index == lead_idx:
            return Utf8Cell.char(ch)
        return Utf8Cell.placeholder()

    return Utf8Cell.static(ascii_cell(byte))


def row_count(length: int) -> int:
    """Number of rows needed to show ``length`` bytes."""
    return -(-length // BYTES_PER_ROW)


def row_label(row_index: int) -> str:
    """Offset label of a row: its first byte offset as five hex digits."""
    return f"{row_index * BYTES_PER_ROW:05X}"


def clamp_scroll(row: int, total_rows: int, client_height: float) -> tuple[int, int]:
    """First visible row and scroll offset after scrolling to ``row``.

    The scroll offset never goes past the point where the last row reaches
    the bottom of a viewport ``client_height`` pixels tall.
    """
    if total_rows == 0:
        return 0, 0
    total_height = total_rows * ROW_HEIGHT_PX
    max_scroll_top = total_height - client_height if total_height > client_height else 0.0
    target = min(row * ROW_HEIGHT_PX, max_scroll_top)
    clamped_row = max(math.floor(target / ROW_HEIGHT_PX), 0)
    scroll_top = min(max(int(target), _I32_MIN), _I32_MAX)
    return clamped_row, scroll_top