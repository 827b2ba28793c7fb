"""
Runtime introspection through the Jolokia JVM agent.

Servers started with ``-javaagent:/path/to/jolokia-agent.jar=port=8778``
expose their MBeans as JSON over HTTP. One bulk read per fetch returns the
heap and non-heap memory usage and the server's recent tick durations.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import psutil
import requests

from ..models.server import RuntimeMetrics
from .base import IntrospectionError, RuntimeIntrospector

logger = logging.getLogger(__name__)

DEFAULT_AGENT_HOST = "127.0.0.1"
DEFAULT_AGENT_PORT = 8778

AGENT_ARGUMENT_PATTERN = re.compile(
    r"^-javaagent:(?P<jar>[^=]*jolokia[^=]*\.jar)(?:=(?P<options>.*))?$",
    re.IGNORECASE,
)

MEMORY_MBEAN = "java.lang:type=Memory"
SERVER_MBEAN = "net.minecraft.server:type=Server"

READ_REQUESTS: List[Dict[str, str]] = [
    {"type": "read", "mbean": MEMORY_MBEAN, "attribute": "HeapMemoryUsage"},
    {"type": "read", "mbean": MEMORY_MBEAN, "attribute": "NonHeapMemoryUsage"},
    {"type": "read", "mbean": SERVER_MBEAN, "attribute": "tickTimes"},
]

# Agent bound to every interface; reach it over loopback.
_WILDCARD_HOSTS = {"0.0.0.0", "*", "::", "[::]"}


def parse_agent_options(options: str) -> Dict[str, str]:
    """
    Parse the comma separated ``key=value`` options of a Jolokia agent argument.

    Examples:
        >>> parse_agent_options("port=8780,host=0.0.0.0")
        {'port': '8780', 'host': '0.0.0.0'}
    """
    parsed: Dict[str, str] = {}
    for option in options.split(","):
        key, sep, value = option.partition("=")
        if sep and key.strip():
            parsed[key.strip()] = value.strip()
    return parsed


def agent_url(options: Dict[str, str], default_port: int = DEFAULT_AGENT_PORT) -> str:
    """
    Build the agent base URL from parsed agent options.

    Raises:
        ValueError: If the port option is not an integer.
    """
    host = options.get("host", DEFAULT_AGENT_HOST)
    if host in _WILDCARD_HOSTS:
        host = DEFAULT_AGENT_HOST
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    port = int(options.get("port", default_port))
    protocol = options.get("protocol", "http")
    return f"{protocol}://{host}:{port}/jolokia/"


class JolokiaIntrospector(RuntimeIntrospector):
    """
    Reads runtime metrics from servers running the Jolokia JVM agent.

    Attributes:
        timeout: HTTP timeout in seconds for one bulk read.
        default_port: Agent port assumed when the agent options omit it.
    """

    def __init__(self, timeout: float = 2.0, default_port: int = DEFAULT_AGENT_PORT,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.default_port = default_port
        # Module-level requests functions open a new session per call.
        self._http = session or requests

    def resolve_handle(self, process: psutil.Process) -> Optional[str]:
        for argument in process.cmdline():
            match = AGENT_ARGUMENT_PATTERN.match(argument)
            if match is None:
                continue
            options = parse_agent_options(match.group("options") or "")
            url = agent_url(options, self.default_port)
            logger.debug(f"Process {process.pid} exposes a Jolokia agent at {url}")
            return url
        return None

    def fetch(self, handle: str) -> RuntimeMetrics:
        """
        Read memory usage and tick times through the agent.

        A server that does not register its MBean yields metrics without step
        latencies; every other failure raises.

        Raises:
            IntrospectionError: On HTTP or transport failure, malformed JSON,
                or a failed memory read.
        """
        try:
            response = self._http.post(handle, json=READ_REQUESTS, timeout=self.timeout)
            response.raise_for_status()
            results = response.json()
        except requests.RequestException as e:
            raise IntrospectionError(f"Jolokia request to {handle} failed: {e}") from e
        except ValueError as e:
            raise IntrospectionError(f"Jolokia response from {handle} is not JSON: {e}") from e

        if not isinstance(results, list) or len(results) != len(READ_REQUESTS):
            raise IntrospectionError(f"Unexpected Jolokia bulk response from {handle}")

        heap = self._memory_usage(results[0], "HeapMemoryUsage")
        non_heap = self._memory_usage(results[1], "NonHeapMemoryUsage")
        tick_times = self._tick_times(results[2])

        return RuntimeMetrics.from_tick_times(
            tick_times,
            heap_used_bytes=heap["used"],
            heap_max_bytes=heap["max"],
            non_heap_used_bytes=non_heap["used"],
        )

    @staticmethod
    def _memory_usage(result: Any, attribute: str) -> Dict[str, int]:
        if not isinstance(result, dict) or result.get("status") != 200:
            error = result.get("error") if isinstance(result, dict) else result
            raise IntrospectionError(f"Reading {attribute} failed: {error}")
        value = result.get("value")
        try:
            return {"used": int(value["used"]), "max": int(value["max"])}
        except (KeyError, TypeError, ValueError) as e:
            raise IntrospectionError(f"Malformed {attribute} value: {value!r}") from e

    @staticmethod
    def _tick_times(result: Any) -> List[int]:
        if not isinstance(result, dict) or result.get("status") != 200:
            logger.debug(f"{SERVER_MBEAN} not readable, reporting no tick samples")
            return []
        value = result.get("value")
        if not isinstance(value, list):
            raise IntrospectionError(f"Malformed tickTimes value: {value!r}")
        try:
            return [int(tick) for tick in value]
        except (TypeError, ValueError) as e:
            raise IntrospectionError(f"Malformed tickTimes value: {value!r}") from e
