"""Message catalogue operations on top of the persistent store and preferences."""

from __future__ import annotations

import gzip
import time
import zlib
from collections.abc import Callable, Iterable

import brotli

from .errors import UiError
from .model import (
    EnvelopeFrameRef,
    LoadedBytes,
    LoadedBytesMode,
    MessageMeta,
    MessageRecord,
    class_record_to_dict,
    load_class_name_map,
    message_record_from_dict,
    message_record_to_dict,
)
from .prefs import Preferences
from .storage import MessageStore

DECOMPRESSION_FORMATS = ("gzip", "deflate", "deflate-raw", "br")

_JSON_RAW_NOTE = "Frame is marked as JSON; showing raw bytes."
_JSON_DECOMPRESSED_NOTE = "Frame is marked as JSON; showing decompressed bytes."


def decompress(fmt: str, data: bytes) -> bytes:
    """Decompress ``data`` as one of gzip, deflate (zlib), deflate-raw or br."""
    try:
        if fmt == "gzip":
            return gzip.decompress(data)
        if fmt == "deflate":
            return zlib.decompress(data)
        if fmt == "deflate-raw":
            return zlib.decompress(data, -zlib.MAX_WBITS)
        if fmt == "br":
            return brotli.decompress(data)
    except Exception as exc:  # each codec raises its own error type
        raise UiError(f"{fmt} failed: {exc}") from exc
    raise UiError(f"Unsupported decompression format: {fmt}")


def _slice(data: bytes, start: int, end: int) -> bytes | None:
    if start > end or end > len(data):
        return None
    return data[start:end]


def _default_clock() -> float:
    return time.time() * 1000.0


class MessageService:
    """Create, load, rename and delete stored messages and their classes."""

    def __init__(
        self,
        store: MessageStore,
        prefs: Preferences | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.store = store
        self.prefs = Preferences() if prefs is None else prefs
        self._clock = _default_clock if clock is None else clock
        self._bytes_cache: dict[int, tuple[int, bytes]] = {}
        self._decompressed: dict[int, bytes] = {}
        self._decompress_errors: dict[int, str] = {}
        self._class_pref: dict[int, str] = {}

    def _now_ms(self) -> int:
        ms = self._clock()
        return int(ms) if ms > 0 else 0

    def _load_record(self, message_id: int) -> MessageRecord:
        value = self.store.get_message_meta(message_id)
        if value is None:
            raise UiError(f"Message {message_id} is missing metadata.")
        return message_record_from_dict(value)

    def _cached_bytes(self, message_id: int, revision: int) -> bytes | None:
        entry = self._bytes_cache.get(message_id)
        if entry is not None and entry[0] == revision:
            return entry[1]
        return None

    def _put_class_name(self, class_id: int, name: str) -> None:
        class_name = name.strip()
        if class_name:
            self.store.put_class_meta(class_id, class_record_to_dict(class_id, class_name))

    def list_messages(self) -> list[MessageMeta]:
        """All messages, most recently modified first."""
        raw = self.store.list_message_meta()
        class_names = load_class_name_map(self.store.list_class_meta())
        out = []
        for value in raw:
            record = message_record_from_dict(value)
            if record.id == record.class_id:
                class_names.setdefault(record.class_id, record.name)
            class_name = class_names.get(record.class_id, f"Class {record.class_id}")
            out.append(
                MessageMeta(
                    id=record.id,
                    class_id=record.class_id,
                    class_name=class_name,
                    name=record.name,
                    modified_ms=record.modified_ms,
                    bytes_len=record.bytes_len,
                )
            )
        out.sort(key=lambda m: (m.modified_ms, m.id), reverse=True)
        return out

    def load_message_bytes(self, message_id: int) -> LoadedBytes:
        record = self._load_record(message_id)
        if record.envelope_ref is not None:
            return self._load_envelope_frame_ref(message_id, record.class_id, record.envelope_ref)

        revision = record.modified_ms
        cached = self._cached_bytes(message_id, revision)
        if cached is not None:
            return LoadedBytes(cached, revision, LoadedBytesMode.PROTOBUF)

        data = self.store.get_message_bytes(message_id)
        if data is None:
            raise UiError(f"Message {message_id} is missing bytes.")
        self._bytes_cache[message_id] = (revision, data)
        return LoadedBytes(data, revision, LoadedBytesMode.PROTOBUF)

    def create_message(self, name: str, data: bytes) -> int:
        """Store a new message in a class of its own and make it current."""
        message_id = self.prefs.alloc_message_id()
        record = MessageRecord(
            id=message_id,
            class_id=message_id,
            name=name,
            modified_ms=self._now_ms(),
            bytes_len=len(data),
        )
        self.store.put_message_bytes_and_meta(message_id, data, message_record_to_dict(record))
        self._put_class_name(message_id, name)
        self.prefs.set_current_message(message_id)
        return message_id

    def create_envelope_frame_ref_in_same_class(
        self,
        source: int,
        name: str,
        payload_offset: int,
        payload_len: int,
        flags: int,
        decompress: bool,
    ) -> int:
        """Create a message that refers to one frame of ``source``'s envelope."""
        message_id = self.prefs.alloc_message_id()
        source_record = self._load_record(source)
        class_id = source_record.class_id
        record = MessageRecord(
            id=message_id,
            class_id=class_id,
            name=name,
            modified_ms=self._now_ms(),
            bytes_len=payload_len,
            envelope_ref=EnvelopeFrameRef(
                source_id=source,
                source_modified_ms=source_record.modified_ms,
                payload_offset=payload_offset,
                payload_len=payload_len,
                flags=flags,
                decompress=decompress,
            ),
        )
        self.store.put_message_meta(message_id, message_record_to_dict(record))
        self._put_class_name(class_id, source_record.name)
        self.prefs.set_current_message(message_id)
        return message_id

    def delete_message(self, message_id: int) -> None:
        record = self._load_record(message_id)
        self.store.delete_message_bytes_and_meta(message_id)

        remaining = self.list_messages()
        if not any(m.class_id == record.class_id for m in remaining):
            for cleanup in (self.store.delete_class_auto_expand, self.store.delete_class_meta):
                try:
                    cleanup(record.class_id)
                except UiError:
                    pass

        if self.prefs.current_message() == message_id:
            self.prefs.set_current_message(remaining[0].id if remaining else None)

    def rename_message(self, message_id: int, name: str) -> None:
        record = self._load_record(message_id)
        record.name = name
        self.store.put_message_meta(message_id, message_record_to_dict(record))
        if record.id == record.class_id:
            self._put_class_name(record.class_id, name)

    def rename_class(self, class_id: int, name: str) -> None:
        name = name.strip()
        if not name:
            raise UiError("Class name is empty.")
        self.store.put_class_meta(class_id, class_record_to_dict(class_id, name))

        root_value = self.store.get_message_meta(class_id)
        if root_value is None:
            return
        record = message_record_from_dict(root_value)
        record.name = name
        self.store.put_message_meta(class_id, message_record_to_dict(record))

    def update_message_bytes(self, message_id: int, data: bytes) -> None:
        """Replace a message's bytes; a frame reference becomes a plain message."""
        record = self._load_record(message_id)
        record.bytes_len = len(data)
        record.modified_ms = self._now_ms()
        record.envelope_ref = None
        self.store.put_message_bytes_and_meta(message_id, data, message_record_to_dict(record))

    def load_auto_expand_paths(self, class_id: int) -> list[str]:
        raw = self.store.get_class_auto_expand(class_id)
        if raw is None:
            return []
        return [line.strip() for line in raw.split("\n") if line.strip()]

    def store_auto_expand_paths(self, class_id: int, paths: Iterable[str]) -> None:
        cleaned = sorted({p.strip() for p in paths if p.strip()})
        if not cleaned:
            try:
                self.store.delete_class_auto_expand(class_id)
            except UiError:
                pass
            return
        self.store.put_class_auto_expand(class_id, "\n".join(cleaned))

    def bump_message_modified(self, message_id: int) -> None:
        record = self._load_record(message_id)
        record.modified_ms = self._now_ms()
        self.store.put_message_meta(message_id, message_record_to_dict(record))

    def message_modified_ms(self, message_id: int) -> int:
        return self._load_record(message_id).modified_ms

    def _load_envelope_frame_ref(
        self, message_id: int, class_id: int, ref: EnvelopeFrameRef
    ) -> LoadedBytes:
        source_record = self._load_record(ref.source_id)
        current_rev = source_record.modified_ms
        if ref.source_modified_ms != 0 and current_rev != ref.source_modified_ms:
            raise UiError(
                f"Message {message_id} references {ref.source_id} at "
                f"modified_ms={ref.source_modified_ms}, but source is now "
                f"modified_ms={current_rev}."
            )

        source_bytes = self._cached_bytes(ref.source_id, current_rev)
        if source_bytes is None:
            source_bytes = self.store.get_message_bytes(ref.source_id)
            if source_bytes is None:
                raise UiError(f"Source message {ref.source_id} is missing bytes.")
            self._bytes_cache[ref.source_id] = (current_rev, source_bytes)

        payload = _slice(source_bytes, ref.payload_offset, ref.payload_offset + ref.payload_len)
        if payload is None:
            raise UiError(f"Message {message_id} payload slice is out of bounds.")

        is_json = bool(ref.flags & 0x02)
        if not ref.decompress:
            if is_json:
                return LoadedBytes(payload, current_rev, LoadedBytesMode.RAW, _JSON_RAW_NOTE)
            return LoadedBytes(payload, current_rev, LoadedBytesMode.PROTOBUF)

        def decompressed(out: bytes) -> LoadedBytes:
            if is_json:
                return LoadedBytes(out, current_rev, LoadedBytesMode.RAW, _JSON_DECOMPRESSED_NOTE)
            return LoadedBytes(out, current_rev, LoadedBytesMode.PROTOBUF)

        cached = self._decompressed.get(message_id)
        if cached is not None:
            return decompressed(cached)

        cached_error = self._decompress_errors.get(message_id)
        if cached_error is not None:
            return LoadedBytes(payload, current_rev, LoadedBytesMode.RAW, cached_error)

        formats: list[str] = []
        preferred = self._class_pref.get(class_id)
        if preferred is not None:
            formats.append(preferred)
        formats.extend(fmt for fmt in DECOMPRESSION_FORMATS if fmt not in formats)

        last_error: str | None = None
        for fmt in formats:
            try:
                out = decompress(fmt, payload)
            except UiError as exc:
                last_error = str(exc)
                continue
            self._decompressed[message_id] = out
            self._class_pref[class_id] = fmt
            return decompressed(out)

        message = last_error or "Decompression failed."
        self._decompress_errors[message_id] = message
        return LoadedBytes(payload, current_rev, LoadedBytesMode.RAW, message)