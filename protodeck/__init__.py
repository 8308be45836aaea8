"""Input decoding, envelope framing, hex cells and a local message catalog for raw Protocol Buffers payloads."""

__version__ = "0.1.0"