"""Envelope framing: a stream of 5-byte-headed frames (flags + big-endian length)."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import UiError

_HEADER_LEN = 5


@dataclass(frozen=True)
class EnvelopeFrame:
    """One frame of an envelope, described by offsets into the envelope bytes."""

    flags: int
    header_offset: int
    payload_offset: int
    payload_len: int

    def is_compressed(self) -> bool:
        return bool(self.flags & 0x01)

    def is_json(self) -> bool:
        return bool(self.flags & 0x02)

    def payload(self, data: bytes) -> bytes:
        """The frame's payload within the envelope it was parsed from."""
        return bytes(data[self.payload_offset : self.payload_offset + self.payload_len])


@dataclass(frozen=True)
class FrameDecompressionMeta:
    format: str
    output_len: int


@dataclass
class EnvelopeFrameMeta:
    protobuf_error: str | None = None
    decompression: FrameDecompressionMeta | None = None
    decompression_error: str | None = None


@dataclass
class EnvelopeView:
    source_id: int
    data: bytes
    frames: list[EnvelopeFrame] = field(default_factory=list)
    meta: list[EnvelopeFrameMeta] = field(default_factory=list)


def parse_envelope_frames(data: bytes) -> list[EnvelopeFrame]:
    """Split envelope bytes into frames, raising UiError on truncation."""
    if not data:
        raise UiError("Envelope is empty.")

    frames: list[EnvelopeFrame] = []
    offset = 0
    total = len(data)
    while offset < total:
        remaining = total - offset
        if remaining < _HEADER_LEN:
            raise UiError(
                f"Envelope ended early at offset {offset}: expected 5-byte frame header, "
                f"found {remaining} byte(s)."
            )
        flags = data[offset]
        length = int.from_bytes(data[offset + 1 : offset + _HEADER_LEN], "big")
        payload_offset = offset + _HEADER_LEN
        payload_end = payload_offset + length
        if payload_end > total:
            raise UiError(
                f"Envelope frame at offset {offset} declares {length} byte(s), "
                f"but only {total - payload_offset} byte(s) remain."
            )
        frames.append(EnvelopeFrame(flags, offset, payload_offset, length))
        offset = payload_end
    return frames


def frame_meta_line(index: int, frame: EnvelopeFrame) -> str:
    """One-line description of a frame's header."""
    return (
        f"frame {index}  flags=0x{frame.flags:02X}  payload={frame.payload_len}B  "
        f"header@{frame.header_offset}  payload@{frame.payload_offset}"
    )


def frame_suffix(frame: EnvelopeFrame, meta: EnvelopeFrameMeta | None) -> str:
    """Short status markers shown after a frame's description."""
    parts = []
    if frame.is_compressed():
        parts.append(" (compressed)")
    if frame.is_json():
        parts.append(" (json)")
    if meta is not None:
        if meta.decompression is not None:
            parts.append(" (decompressed)")
        if meta.decompression_error is not None:
            parts.append(" (decompression error)")
        if meta.protobuf_error is not None:
            parts.append(" (protobuf error)")
    return "".join(parts)


def frame_title(index: int, frame: EnvelopeFrame, meta: EnvelopeFrameMeta | None) -> str:
    """Detailed description of a frame, including decode and decompression results."""
    parts = [frame_meta_line(index, frame)]
    if frame.is_compressed():
        parts.append(" [compressed]")
    if frame.is_json():
        parts.append(" [json]")
    if meta is not None:
        info = meta.decompression
        if info is not None:
            parts.append(f" [decompressed format={info.format} output={info.output_len}B]")
        if meta.decompression_error is not None:
            parts.append(f" [decompression_error={meta.decompression_error}]")
        if meta.protobuf_error is not None:
            parts.append(f" [protobuf_error={meta.protobuf_error}]")
    return "".join(parts)