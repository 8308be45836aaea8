"""Persistent storage of message bytes, metadata and per-class settings."""

from __future__ import annotations

import json
import os
import sqlite3
from contextlib import contextmanager
from collections.abc import Iterator
from typing import Any

from .errors import UiError

STORE_MESSAGE_BYTES = "message_bytes"
STORE_METADATA = "metadata"
STORE_CLASS_AUTO_EXPAND = "class_auto_expand"
STORE_CLASS_META = "class_meta"

_STORES = (STORE_MESSAGE_BYTES, STORE_METADATA, STORE_CLASS_AUTO_EXPAND, STORE_CLASS_META)


class MessageStore:
    """Key/value stores kept in one SQLite database (in memory by default)."""

    def __init__(self, path: str | os.PathLike[str] = ":memory:") -> None:
        try:
            self._conn = sqlite3.connect(os.fspath(path))
            with self._conn:
                for store in _STORES:
                    self._conn.execute(
                        f"CREATE TABLE IF NOT EXISTS {store} (key TEXT PRIMARY KEY, value)"
                    )
        except sqlite3.Error as exc:
            raise UiError(f"Storage open failed: {exc}") from exc

    @contextmanager
    def _op(self, action: str) -> Iterator[sqlite3.Connection]:
        try:
            with self._conn:
                yield self._conn
        except sqlite3.Error as exc:
            raise UiError(f"Storage {action} failed: {exc}") from exc

    def _get_raw(self, store: str, key: int) -> Any:
        with self._op("get") as conn:
            row = conn.execute(f"SELECT value FROM {store} WHERE key = ?", (str(key),)).fetchone()
        return None if row is None else row[0]

    def _get_json(self, store: str, key: int) -> Any:
        raw = self._get_raw(store, key)
        return None if raw is None else json.loads(raw)

    def _get_all_json(self, store: str) -> list[Any]:
        with self._op("getAll") as conn:
            rows = conn.execute(f"SELECT value FROM {store} ORDER BY key").fetchall()
        return [json.loads(value) for (value,) in rows]

    @staticmethod
    def _encode(value: Any) -> str:
        try:
            return json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise UiError(f"Storage put failed: {exc}") from exc

    def _put_json(self, store: str, key: int, value: Any) -> None:
        encoded = self._encode(value)
        with self._op("put") as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO {store} (key, value) VALUES (?, ?)", (str(key), encoded)
            )

    def _delete(self, store: str, key: int) -> None:
        with self._op("delete") as conn:
            conn.execute(f"DELETE FROM {store} WHERE key = ?", (str(key),))

    def get_message_bytes(self, message_id: int) -> bytes | None:
        value = self._get_raw(STORE_MESSAGE_BYTES, message_id)
        if value is None:
            return None
        if not isinstance(value, bytes):
            raise UiError("Stored message value is not binary data.")
        return value

    def get_message_meta(self, message_id: int) -> Any:
        return self._get_json(STORE_METADATA, message_id)

    def list_message_meta(self) -> list[Any]:
        return self._get_all_json(STORE_METADATA)

    def put_message_meta(self, message_id: int, value: Any) -> None:
        self._put_json(STORE_METADATA, message_id, value)

    def list_class_meta(self) -> list[Any]:
        return self._get_all_json(STORE_CLASS_META)

    def put_class_meta(self, class_id: int, value: Any) -> None:
        self._put_json(STORE_CLASS_META, class_id, value)

    def get_class_auto_expand(self, class_id: int) -> str | None:
        value = self._get_json(STORE_CLASS_AUTO_EXPAND, class_id)
        if value is None:
            return None
        if not isinstance(value, str):
            raise UiError("Stored class_auto_expand must be a string.")
        return value

    def put_class_auto_expand(self, class_id: int, value: str) -> None:
        self._put_json(STORE_CLASS_AUTO_EXPAND, class_id, value)

    def delete_class_auto_expand(self, class_id: int) -> None:
        self._delete(STORE_CLASS_AUTO_EXPAND, class_id)

    def delete_class_meta(self, class_id: int) -> None:
        self._delete(STORE_CLASS_META, class_id)

    def put_message_bytes_and_meta(self, message_id: int, data: bytes, meta: Any) -> None:
        """Write a message's bytes and metadata in one transaction."""
        encoded = self._encode(meta)
        key = str(message_id)
        with self._op("put") as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO {STORE_MESSAGE_BYTES} (key, value) VALUES (?, ?)",
                (key, bytes(data)),
            )
            conn.execute(
                f"INSERT OR REPLACE INTO {STORE_METADATA} (key, value) VALUES (?, ?)",
                (key, encoded),
            )

    def delete_message_bytes_and_meta(self, message_id: int) -> None:
        """Remove a message's metadata and bytes in one transaction."""
        key = str(message_id)
        with self._op("delete") as conn:
            conn.execute(f"DELETE FROM {STORE_METADATA} WHERE key = ?", (key,))
            conn.execute(f"DELETE FROM {STORE_MESSAGE_BYTES} WHERE key = ?", (key,))

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> MessageStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()