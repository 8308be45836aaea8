"""Small persisted preferences kept in a string key/value store."""

from __future__ import annotations

import json
import re
from collections.abc import MutableMapping

from .errors import UiError

KEY_CURRENT = "protodeck.v1.current_message"
KEY_NEXT_ID = "protodeck.v1.next_message_id"
KEY_FRAME_NAME_TEMPLATE = "protodeck.v1.frame_name_template"
KEY_THEME_PREF = "protodeck.v1.theme"

DEFAULT_FRAME_NAME_TEMPLATE = "{source} frame {idx} ({len}B)"

_U64_MAX = 2**64 - 1
_U64_RE = re.compile(r"\+?[0-9]+")
_THEMES = ("light", "dark", "system")


def _parse_u64(text: str) -> int:
    if not _U64_RE.fullmatch(text):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value > _U64_MAX:
        raise ValueError(f"unsigned integer out of range: {text!r}")
    return value


class Preferences:
    """Preferences stored in a mutable string mapping (a plain dict by default)."""

    def __init__(self, storage: MutableMapping[str, str] | None = None) -> None:
        self.storage: MutableMapping[str, str] = {} if storage is None else storage

    def store_theme_pref(self, pref: str) -> None:
        value = pref.strip()
        if value not in _THEMES:
            raise UiError(
                f"Invalid theme pref {json.dumps(value, ensure_ascii=False)}. "
                'Expected "light", "dark", or "system".'
            )
        self.storage[KEY_THEME_PREF] = value

    def load_frame_name_template(self) -> str:
        return self.storage.get(KEY_FRAME_NAME_TEMPLATE, DEFAULT_FRAME_NAME_TEMPLATE)

    def store_frame_name_template(self, template: str) -> None:
        value = template.strip()
        if not value or value == DEFAULT_FRAME_NAME_TEMPLATE:
            self.storage.pop(KEY_FRAME_NAME_TEMPLATE, None)
        else:
            self.storage[KEY_FRAME_NAME_TEMPLATE] = value

    def current_message(self) -> int | None:
        raw = self.storage.get(KEY_CURRENT)
        if raw is None or not raw.strip():
            return None
        try:
            return _parse_u64(raw.strip())
        except ValueError as exc:
            raise UiError("Invalid current message id.") from exc

    def set_current_message(self, message_id: int | None) -> None:
        if message_id is None:
            self.storage.pop(KEY_CURRENT, None)
        else:
            self.storage[KEY_CURRENT] = str(message_id)

    def alloc_message_id(self) -> int:
        """Hand out the next message id and advance the stored counter."""
        raw = self.storage.get(KEY_NEXT_ID, "1")
        try:
            next_id = _parse_u64(raw.strip())
        except ValueError:
            next_id = 1
        self.storage[KEY_NEXT_ID] = str(min(next_id + 1, _U64_MAX))
        return next_id


def sanitize_filename(text: str) -> str:
    """Keep ASCII letters, digits, '-' and '_'; spaces become single dashes."""
    kept = []
    for ch in text:
        if ch.isascii() and (ch.isalnum() or ch in "-_"):
            kept.append(ch)
        elif ch == " ":
            kept.append("-")
    out = "".join(kept)
    while "--" in out:
        out = out.replace("--", "-")
    return out.strip("-")


def download_filename(name: str, message_id: int) -> str:
    base = sanitize_filename(name) or f"message-{message_id}"
    return f"{base}.bin"