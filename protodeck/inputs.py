"""Decoding of pasted user input (hex or base64) and base64 helpers."""

from __future__ import annotations

import base64
import string

from .errors import UiError

_HEX_DIGITS = frozenset(string.hexdigits)
_STANDARD_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "+/"
_URL_SAFE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"
_TO_STANDARD = str.maketrans("-_", "+/")


def _strict_b64decode(text: str, *, url_safe: bool, padded: bool) -> bytes:
    """Decode base64 strictly: canonical padding (or none) and zero trailing bits."""
    alphabet = _URL_SAFE_ALPHABET if url_safe else _STANDARD_ALPHABET
    if padded:
        if len(text) % 4 != 0:
            raise ValueError("Invalid padding")
        body = text.rstrip("=")
        if len(text) - len(body) > 2:
            raise ValueError("Invalid padding")
        if len(text) != len(body) and (len(body) + (len(text) - len(body))) % 4 != 0:
            raise ValueError("Invalid padding")
    else:
        body = text
    for offset, ch in enumerate(body):
        if ch not in alphabet:
            raise ValueError(f"Invalid symbol {ord(ch)}, offset {offset}.")
    remainder = len(body) % 4
    if remainder == 1:
        raise ValueError("Invalid input length")
    if padded and len(text) != len(body) and remainder == 0:
        raise ValueError("Invalid padding")
    if remainder:
        last = alphabet.index(body[-1])
        mask = 0x0F if remainder == 2 else 0x03
        if last & mask:
            raise ValueError(f"Invalid last symbol {ord(body[-1])}, offset {len(body) - 1}.")
    canonical = body.translate(_TO_STANDARD) if url_safe else body
    canonical += "=" * (-len(canonical) % 4)
    return base64.b64decode(canonical, validate=True)


def decode_user_input(text: str) -> bytes:
    """Decode pasted text as hex (optionally ``0x``-prefixed) or base64."""
    trimmed = text.strip()
    if not trimmed:
        raise UiError("Input is empty.")

    no_ws = "".join(ch for ch in trimmed if not ch.isspace())
    if not no_ws:
        raise UiError("Input is empty.")

    hex_candidate = no_ws[2:] if no_ws.startswith("0x") else no_ws
    looks_like_hex = (
        len(hex_candidate) % 2 == 0
        and bool(hex_candidate)
        and all(ch in _HEX_DIGITS for ch in hex_candidate)
    )
    if looks_like_hex:
        try:
            return bytes.fromhex(hex_candidate)
        except ValueError:
            pass

    for url_safe, padded in ((False, True), (True, True), (True, False)):
        try:
            return _strict_b64decode(no_ws, url_safe=url_safe, padded=padded)
        except ValueError:
            continue

    raise UiError("Failed to decode input as hex or base64.")


def encode_base64(data: bytes) -> str:
    """Standard base64 with padding."""
    return base64.b64encode(data).decode("ascii")


def encode_base64_url(data: bytes) -> str:
    """URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def decode_base64_url(text: str) -> bytes:
    """Decode URL-safe base64 that carries no padding."""
    try:
        return _strict_b64decode(text, url_safe=True, padded=False)
    except ValueError as exc:
        raise UiError(f"Failed to decode URL-safe base64: {exc}") from exc