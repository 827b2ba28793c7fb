"""
Server list ping protocol: varint codec, framing and the liveness client.
"""

from .client import (
    PING_REQUEST,
    PING_SENTINEL,
    STATUS_REQUEST,
    LivenessProtocolClient,
    build_frame,
    encode_string,
    parse_status_payload,
)
from .errors import (
    ConnectTimeout,
    LivenessProtocolError,
    ProtocolMismatch,
    TruncatedStream,
    UnexpectedPacketId,
)
from .varint import decode_varint, encode_varint, read_varint

__all__ = [
    "LivenessProtocolClient",
    "PING_REQUEST",
    "PING_SENTINEL",
    "STATUS_REQUEST",
    "build_frame",
    "encode_string",
    "parse_status_payload",
    "ConnectTimeout",
    "LivenessProtocolError",
    "ProtocolMismatch",
    "TruncatedStream",
    "UnexpectedPacketId",
    "decode_varint",
    "encode_varint",
    "read_varint",
]
