"""
Client for the server list ping exchange.

A probe opens one short-lived TCP connection and performs two round trips:

1. handshake (next state = status) followed by an empty status request,
   answered by a status response carrying a JSON document;
2. a ping carrying a fixed 8-byte sentinel, answered by a pong that must
   echo it.

Frames are ``[varint length][varint packet id][payload]`` where length
counts the packet id and the payload. The connection is closed on every
exit path.
"""

import json
import logging
import socket
import time
from typing import Any, BinaryIO, Callable, Dict, Optional, Tuple

from ..models.server import LivenessMetrics
from .errors import ConnectTimeout, ProtocolMismatch, TruncatedStream, UnexpectedPacketId
from .varint import decode_varint, encode_varint, read_varint

logger = logging.getLogger(__name__)

HANDSHAKE_PACKET_ID = 0x00
STATUS_REQUEST_PACKET_ID = 0x00
STATUS_RESPONSE_PACKET_ID = 0x00
PING_PACKET_ID = 0x01
PONG_PACKET_ID = 0x01

NEXT_STATE_STATUS = 1
PING_SENTINEL = 0x0123456789ABCDEF

# Largest length a 3-byte varint can express; servers never send more.
MAX_FRAME_LENGTH = (1 << 21) - 1

DEFAULT_TIMEOUT = 1.0


def build_frame(packet_id: int, payload: bytes = b"") -> bytes:
    """Prefix a packet id and payload with their combined varint length."""
    body = encode_varint(packet_id) + payload
    return encode_varint(len(body)) + body


def encode_string(value: str) -> bytes:
    """Encode a UTF-8 string with a varint byte-length prefix."""
    data = value.encode("utf-8")
    return encode_varint(len(data)) + data


def _handshake_payload() -> bytes:
    # protocol version placeholder, empty address, port 0, next state
    return (
        encode_varint(0)
        + encode_string("")
        + (0).to_bytes(2, "big")
        + encode_varint(NEXT_STATE_STATUS)
    )


STATUS_REQUEST = (
    build_frame(HANDSHAKE_PACKET_ID, _handshake_payload())
    + build_frame(STATUS_REQUEST_PACKET_ID)
)
PING_REQUEST = build_frame(PING_PACKET_ID, PING_SENTINEL.to_bytes(8, "big"))


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """
    Read exactly ``size`` bytes.

    Raises:
        TruncatedStream: If the stream ends first.
    """
    data = stream.read(size)
    if data is None or len(data) < size:
        got = 0 if data is None else len(data)
        raise TruncatedStream(f"expected {size} bytes, stream ended after {got}")
    return data


def read_frame_length(stream: BinaryIO) -> int:
    """
    Read and bound-check a frame length prefix.

    Raises:
        TruncatedStream: If the stream ends inside the prefix.
        ProtocolMismatch: If the declared length is empty or oversized.
    """
    length = read_varint(stream)
    if length == 0:
        raise ProtocolMismatch("empty frame without a packet id")
    if length > MAX_FRAME_LENGTH:
        raise ProtocolMismatch(f"frame length {length} exceeds {MAX_FRAME_LENGTH}")
    return length


def split_packet(body: bytes) -> Tuple[int, bytes]:
    """Split a frame body into its packet id and payload."""
    packet_id, offset = decode_varint(body)
    return packet_id, body[offset:]


def _require(container: Dict[str, Any], key: str, expected_type: type, path: str) -> Any:
    value = container.get(key)
    # bool is a subclass of int and is never a valid count or version
    if not isinstance(value, expected_type) or isinstance(value, bool):
        raise ProtocolMismatch(
            f"status field '{path}' missing or not {expected_type.__name__}: {value!r}",
            field_name=path,
        )
    return value


def parse_status_payload(payload: bytes) -> Dict[str, Any]:
    """
    Parse the payload of a status response.

    Args:
        payload: Bytes following the packet id: a varint-prefixed UTF-8 JSON string.

    Returns:
        Dictionary with ``version_string``, ``protocol_version``,
        ``players_online`` and ``players_max``.

    Raises:
        TruncatedStream: If the string prefix is incomplete or overruns the payload.
        ProtocolMismatch: If the JSON is malformed or a required field is missing
            or mistyped.
    """
    size, offset = decode_varint(payload)
    if offset + size > len(payload):
        raise TruncatedStream(
            f"status string declares {size} bytes, only {len(payload) - offset} present"
        )
    raw = payload[offset:offset + size]

    try:
        document = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ProtocolMismatch(f"status response is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise ProtocolMismatch("status response is not a JSON object")

    version = document.get("version")
    if not isinstance(version, dict):
        raise ProtocolMismatch("status field 'version' missing", field_name="version")
    players = document.get("players")
    if not isinstance(players, dict):
        raise ProtocolMismatch("status field 'players' missing", field_name="players")

    return {
        "version_string": _require(version, "name", str, "version.name"),
        "protocol_version": _require(version, "protocol", int, "version.protocol"),
        "players_online": _require(players, "online", int, "players.online"),
        "players_max": _require(players, "max", int, "players.max"),
    }


class LivenessProtocolClient:
    """
    Measures application-level liveness of a server.

    Each call to probe() owns its connection; the client itself holds no
    connection state and may be shared between threads.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], int] = time.monotonic_ns,
    ):
        """
        Args:
            timeout: Default deadline in seconds for connect and for each read.
            clock: Monotonic nanosecond clock used to time the ping.
        """
        self.timeout = timeout
        self._clock = clock

    def probe(
        self,
        address: Tuple[str, int],
        connect_timeout: Optional[float] = None,
    ) -> LivenessMetrics:
        """
        Run the status + ping exchange against one server.

        Args:
            address: (host, port) of the server.
            connect_timeout: Deadline in seconds, defaults to the client timeout.

        Returns:
            LivenessMetrics for a fully successful exchange.

        Raises:
            ConnectTimeout: If connecting or any read exceeds the deadline.
            UnexpectedPacketId: If a response carries the wrong packet id.
            ProtocolMismatch: If the status document or the pong is malformed.
            TruncatedStream: If the server closes the connection mid-frame.
            OSError: For other socket failures (e.g. connection refused).
        """
        timeout = self.timeout if connect_timeout is None else connect_timeout
        host, port = address

        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except TimeoutError as e:
            raise ConnectTimeout(f"connect to {host}:{port} timed out after {timeout}s") from e

        try:
            with sock, sock.makefile("rb") as reader:
                return self._exchange(sock, reader)
        except TimeoutError as e:
            raise ConnectTimeout(f"{host}:{port} did not answer within {timeout}s") from e

    def _exchange(self, sock: socket.socket, reader: BinaryIO) -> LivenessMetrics:
        sock.sendall(STATUS_REQUEST)

        length = read_frame_length(reader)
        packet_id, payload = split_packet(read_exact(reader, length))
        if packet_id != STATUS_RESPONSE_PACKET_ID:
            raise UnexpectedPacketId(STATUS_RESPONSE_PACKET_ID, packet_id)
        status = parse_status_payload(payload)

        ping_sent = self._clock()
        sock.sendall(PING_REQUEST)

        length = read_frame_length(reader)
        pong_received = self._clock()
        packet_id, payload = split_packet(read_exact(reader, length))
        if packet_id != PONG_PACKET_ID:
            raise UnexpectedPacketId(PONG_PACKET_ID, packet_id)
        if len(payload) != 8:
            raise ProtocolMismatch(f"pong payload is {len(payload)} bytes, expected 8")
        echoed = int.from_bytes(payload, "big")
        if echoed != PING_SENTINEL:
            raise ProtocolMismatch(f"pong payload {echoed:#018x} does not echo the ping sentinel")

        logger.debug(
            f"Ping exchange completed in {(pong_received - ping_sent) / 1e6:.3f} ms "
            f"(version {status['version_string']})"
        )
        return LivenessMetrics(round_trip_latency_ns=pong_received - ping_sent, **status)
