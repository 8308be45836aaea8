"""Message catalogue records and their conversion to and from stored mappings."""

from __future__ import annotations

import enum
import json
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .errors import UiError

_U64_MAX = 2**64 - 1
_U64_RE = re.compile(r"\+?[0-9]+")

META_ID = "id"
META_CLASS_ID = "class_id"
META_NAME = "name"
META_MODIFIED_MS = "modified_ms"
META_BYTES_LEN = "bytes_len"
META_REF_KIND = "ref_kind"
META_REF_SOURCE_ID = "ref_source_id"
META_REF_SOURCE_MODIFIED_MS = "ref_source_modified_ms"
META_REF_PAYLOAD_OFFSET = "ref_payload_offset"
META_REF_PAYLOAD_LEN = "ref_payload_len"
META_REF_FLAGS = "ref_flags"
META_REF_DECOMPRESS = "ref_decompress"

CLASS_META_ID = "id"
CLASS_META_NAME = "name"

REF_KIND_ENVELOPE_FRAME = "envelope_frame"


@dataclass(frozen=True)
class MessageMeta:
    """What the message list shows about one stored message."""

    id: int
    class_id: int
    class_name: str
    name: str
    modified_ms: int
    bytes_len: int


class LoadedBytesMode(enum.Enum):
    PROTOBUF = "protobuf"
    RAW = "raw"


@dataclass
class LoadedBytes:
    """Bytes of a message ready to display, with how they should be shown."""

    data: bytes
    revision: int
    mode: LoadedBytesMode
    note: str | None = None


@dataclass(frozen=True)
class EnvelopeFrameRef:
    """A message that is a view onto one frame of another message's envelope."""

    source_id: int
    source_modified_ms: int
    payload_offset: int
    payload_len: int
    flags: int
    decompress: bool


@dataclass
class MessageRecord:
    """A message's stored metadata."""

    id: int
    class_id: int
    name: str
    modified_ms: int
    bytes_len: int
    envelope_ref: EnvelopeFrameRef | None = None


def _parse_u64(text: str) -> int:
    if not _U64_RE.fullmatch(text):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value > _U64_MAX:
        raise ValueError(f"unsigned integer out of range: {text!r}")
    return value


def _number_to_u64(value: Any, key: str) -> int | None:
    """Convert a numeric value; None if the value is not a number at all."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        raise UiError(f"metadata.{key} must be a non-negative number.")
    if value < 0:
        raise UiError(f"metadata.{key} must be a non-negative number.")
    return min(int(value), _U64_MAX)


def _get_optional_string(obj: Mapping[str, Any], key: str) -> str | None:
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise UiError(f"metadata.{key} must be a string.")
    return value


def _get_optional_bool(obj: Mapping[str, Any], key: str) -> bool | None:
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise UiError(f"metadata.{key} must be a boolean.")
    return value


def _get_optional_u64(obj: Mapping[str, Any], key: str) -> int | None:
    value = obj.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        try:
            return _parse_u64(value.strip())
        except ValueError as exc:
            raise UiError(f"metadata.{key} must be a u64 string.") from exc
    number = _number_to_u64(value, key)
    if number is None:
        raise UiError(f"metadata.{key} must be a number.")
    return number


def _get_optional_id(obj: Mapping[str, Any], key: str) -> int | None:
    value = obj.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        try:
            return _parse_u64(value.strip())
        except ValueError as exc:
            raise UiError(f"metadata.{key} is invalid.") from exc
    number = _number_to_u64(value, key)
    if number is None:
        raise UiError(f"metadata.{key} must be a string or number.")
    return number


def _get_required_id(obj: Mapping[str, Any], key: str) -> int:
    value = _get_optional_id(obj, key)
    if value is None:
        raise UiError(f"metadata.{key} is missing.")
    return value


def message_record_to_dict(record: MessageRecord) -> dict[str, Any]:
    """The stored form of a message record."""
    out: dict[str, Any] = {
        META_ID: str(record.id),
        META_CLASS_ID: str(record.class_id),
        META_NAME: record.name,
        META_MODIFIED_MS: record.modified_ms,
        META_BYTES_LEN: record.bytes_len,
    }
    ref = record.envelope_ref
    if ref is not None:
        out.update(
            {
                META_REF_KIND: REF_KIND_ENVELOPE_FRAME,
                META_REF_SOURCE_ID: str(ref.source_id),
                META_REF_SOURCE_MODIFIED_MS: ref.source_modified_ms,
                META_REF_PAYLOAD_OFFSET: ref.payload_offset,
                META_REF_PAYLOAD_LEN: ref.payload_len,
                META_REF_FLAGS: ref.flags,
                META_REF_DECOMPRESS: ref.decompress,
            }
        )
    return out


def message_record_from_dict(value: Any) -> MessageRecord:
    """Read a message record back, filling in defaults for missing fields."""
    if not isinstance(value, Mapping):
        raise UiError("Message metadata is not an object.")

    message_id = _get_required_id(value, META_ID)
    class_id = _get_optional_id(value, META_CLASS_ID)
    name = _get_optional_string(value, META_NAME)
    modified_ms = _get_optional_u64(value, META_MODIFIED_MS)
    bytes_len = _get_optional_u64(value, META_BYTES_LEN)
    bytes_len = 0 if bytes_len is None else bytes_len

    kind = _get_optional_string(value, META_REF_KIND)
    envelope_ref: EnvelopeFrameRef | None
    if kind is None:
        envelope_ref = None
    elif kind == REF_KIND_ENVELOPE_FRAME:
        source_id = _get_required_id(value, META_REF_SOURCE_ID)
        source_modified_ms = _get_optional_u64(value, META_REF_SOURCE_MODIFIED_MS)
        payload_offset = _get_optional_u64(value, META_REF_PAYLOAD_OFFSET)
        payload_len = _get_optional_u64(value, META_REF_PAYLOAD_LEN)
        flags = _get_optional_u64(value, META_REF_FLAGS)
        decompress = _get_optional_bool(value, META_REF_DECOMPRESS)
        envelope_ref = EnvelopeFrameRef(
            source_id=source_id,
            source_modified_ms=source_modified_ms or 0,
            payload_offset=payload_offset or 0,
            payload_len=bytes_len if payload_len is None else payload_len,
            flags=(flags or 0) & 0xFF,
            decompress=bool(decompress),
        )
    else:
        raise UiError(
            f"Message {message_id} has unknown ref_kind: {json.dumps(kind, ensure_ascii=False)}"
        )

    return MessageRecord(
        id=message_id,
        class_id=message_id if class_id is None else class_id,
        name=f"Message {message_id}" if name is None else name,
        modified_ms=modified_ms or 0,
        bytes_len=bytes_len,
        envelope_ref=envelope_ref,
    )


def class_record_to_dict(class_id: int, name: str) -> dict[str, Any]:
    """The stored form of a class name record."""
    return {CLASS_META_ID: str(class_id), CLASS_META_NAME: name}


def class_record_from_dict(value: Any) -> tuple[int, str]:
    """Read a class record as (class id, display name)."""
    if not isinstance(value, Mapping):
        raise UiError("Class metadata is not an object.")
    class_id = _get_required_id(value, CLASS_META_ID)
    raw = (_get_optional_string(value, CLASS_META_NAME) or "").strip()
    return class_id, raw or f"Class {class_id}"


def load_class_name_map(values: Iterable[Any]) -> dict[int, str]:
    """Map class ids to names; later records win over earlier ones."""
    return dict(class_record_from_dict(value) for value in values)