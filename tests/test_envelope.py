import struct

import pytest

from protodeck.envelope import (
    EnvelopeFrame,
    EnvelopeFrameMeta,
    FrameDecompressionMeta,
    frame_meta_line,
    frame_suffix,
    frame_title,
    parse_envelope_frames,
)
from protodeck.errors import UiError


def build_frame(flags, payload):
    return struct.pack(">BI", flags, len(payload)) + bytes(payload)


def test_parses_two_frames():
    data = build_frame(0x00, [0x08, 0x96, 0x01]) + build_frame(
        0x01, [0x12, 0x03, 0x61, 0x62, 0x63]
    )
    frames = parse_envelope_frames(data)
    assert frames == [
        EnvelopeFrame(flags=0x00, header_offset=0, payload_offset=5, payload_len=3),
        EnvelopeFrame(flags=0x01, header_offset=8, payload_offset=13, payload_len=5),
    ]
    assert frames[0].payload(data) == bytes([0x08, 0x96, 0x01])
    assert frames[1].payload(data) == bytes([0x12, 0x03, 0x61, 0x62, 0x63])
    assert not frames[0].is_compressed()
    assert frames[1].is_compressed()


def test_rejects_truncated_header():
    with pytest.raises(UiError) as excinfo:
        parse_envelope_frames(bytes([0x00, 0x00, 0x00, 0x00]))
    assert "expected 5-byte frame header" in str(excinfo.value)


def test_rejects_truncated_payload():
    data = bytes([0x00]) + struct.pack(">I", 3) + bytes([0xAA, 0xBB])
    with pytest.raises(UiError) as excinfo:
        parse_envelope_frames(data)
    assert "declares 3 byte(s)" in str(excinfo.value)


def test_rejects_empty_envelope():
    with pytest.raises(UiError, match="Envelope is empty."):
        parse_envelope_frames(b"")


def test_empty_payload_frame():
    frames = parse_envelope_frames(build_frame(0x02, b""))
    assert frames == [EnvelopeFrame(0x02, 0, 5, 0)]
    assert frames[0].is_json()
    assert not frames[0].is_compressed()


def test_frame_meta_line():
    frame = EnvelopeFrame(flags=0x01, header_offset=8, payload_offset=13, payload_len=5)
    assert frame_meta_line(1, frame) == "frame 1  flags=0x01  payload=5B  header@8  payload@13"


def test_frame_suffix_and_title():
    frame = EnvelopeFrame(flags=0x03, header_offset=0, payload_offset=5, payload_len=3)
    meta = EnvelopeFrameMeta(
        protobuf_error="bad tag",
        decompression=FrameDecompressionMeta(format="gzip", output_len=10),
        decompression_error=None,
    )
    assert frame_suffix(frame, meta) == (
        " (compressed) (json) (decompressed) (protobuf error)"
    )
    assert frame_title(0, frame, meta) == (
        frame_meta_line(0, frame)
        + " [compressed] [json] [decompressed format=gzip output=10B] [protobuf_error=bad tag]"
    )


def test_frame_suffix_without_meta():
    frame = EnvelopeFrame(flags=0x00, header_offset=0, payload_offset=5, payload_len=0)
    assert frame_suffix(frame, None) == ""
    assert frame_title(2, frame, None) == frame_meta_line(2, frame)