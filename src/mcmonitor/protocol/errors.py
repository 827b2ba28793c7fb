"""
Error taxonomy of the server list ping protocol.
"""

from typing import Optional


class LivenessProtocolError(Exception):
    """Base class for every failure of a liveness probe exchange."""


class TruncatedStream(LivenessProtocolError):
    """The stream ended before a complete value or frame was read."""


class ConnectTimeout(LivenessProtocolError):
    """The server did not accept the connection or answer within the probe timeout."""


class UnexpectedPacketId(LivenessProtocolError):
    """A frame arrived with a packet id other than the one the exchange expects."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Unexpected packet id {actual:#04x} (expected {expected:#04x})")
        self.expected = expected
        self.actual = actual


class ProtocolMismatch(LivenessProtocolError):
    """The server answered with content that does not match the protocol."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name
