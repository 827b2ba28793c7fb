"""
Variable-length integer codec.

Each byte carries seven value bits, least-significant group first; the high
bit is set on every byte except the last. Negative values are encoded as
their 32-bit two's complement, which is how the protocol transmits -1.
The decoder enforces no maximum length; callers bound the frame size.
"""

from typing import BinaryIO, Tuple

from .errors import TruncatedStream

_SEGMENT_BITS = 0x7F
_CONTINUE_BIT = 0x80


def encode_varint(value: int) -> bytes:
    """
    Encode an integer as a varint.

    Args:
        value: Integer in the signed or unsigned 32-bit range.

    Returns:
        The encoded bytes (1 to 5 bytes for 32-bit input).

    Raises:
        ValueError: If value does not fit in 32 bits.
    """
    if value < -(1 << 31) or value >= (1 << 32):
        raise ValueError(f"varint value out of 32-bit range: {value}")
    value &= 0xFFFFFFFF

    out = bytearray()
    while True:
        if value & ~_SEGMENT_BITS == 0:
            out.append(value)
            return bytes(out)
        out.append((value & _SEGMENT_BITS) | _CONTINUE_BIT)
        value >>= 7


def read_varint(stream: BinaryIO) -> int:
    """
    Read one varint from a binary stream.

    Args:
        stream: Object with a ``read(n)`` method returning bytes.

    Returns:
        The decoded unsigned value.

    Raises:
        TruncatedStream: If the stream ends before a byte with the high bit clear.
    """
    value = 0
    shift = 0
    while True:
        chunk = stream.read(1)
        if not chunk:
            raise TruncatedStream(f"stream ended inside a varint after {shift // 7} byte(s)")
        byte = chunk[0]
        value |= (byte & _SEGMENT_BITS) << shift
        if not byte & _CONTINUE_BIT:
            return value
        shift += 7


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Decode one varint from a byte buffer.

    Returns:
        Tuple of (value, offset just past the varint).

    Raises:
        TruncatedStream: If the buffer ends inside the varint.
    """
    value = 0
    shift = 0
    position = offset
    while True:
        if position >= len(data):
            raise TruncatedStream(f"buffer ended inside a varint at offset {position}")
        byte = data[position]
        position += 1
        value |= (byte & _SEGMENT_BITS) << shift
        if not byte & _CONTINUE_BIT:
            return value, position
        shift += 7
