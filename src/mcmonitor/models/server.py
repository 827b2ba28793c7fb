"""
Server status data models.

This module contains the per-scrape entities produced by discovery and
aggregation: on-disk installations, running process evidence, the two
optional probe results, and the Online/Offline status variant consumed
by the exposition layer. Every entity is immutable and lives for a single
scrape cycle.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Union

# Name of the file that marks a directory as a server installation.
CONFIG_FILENAME = "server.properties"

DEFAULT_LEVEL_NAME = "world"
DEFAULT_SERVER_PORT = 25565
DEFAULT_MAX_PLAYERS = 20


@dataclass(frozen=True)
class Installation:
    """
    A directory recognized as hosting one server instance.

    Attributes:
        path: Absolute directory path; the correlation key against
              ProcessHandle.working_directory.
        properties: Key/value pairs read from server.properties.
        world_size_bytes: Recursive size of the data directory, 0 if absent.
    """

    path: Path
    properties: Mapping[str, str] = field(default_factory=dict)
    world_size_bytes: int = 0

    @property
    def name(self) -> str:
        """Directory leaf name, used as the server label."""
        return self.path.name

    @property
    def level_name(self) -> str:
        return self.properties.get("level-name") or DEFAULT_LEVEL_NAME

    @property
    def server_port(self) -> int:
        """
        Configured listen port.

        Raises:
            ValueError: If server-port is present but not an integer.
        """
        raw = self.properties.get("server-port", "").strip()
        if not raw:
            return DEFAULT_SERVER_PORT
        return int(raw)

    @property
    def max_players(self) -> Optional[int]:
        raw = self.properties.get("max-players", "").strip()
        if not raw:
            return DEFAULT_MAX_PLAYERS
        try:
            return int(raw)
        except ValueError:
            return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "world_size_bytes": self.world_size_bytes,
            "server_port": self.properties.get("server-port", str(DEFAULT_SERVER_PORT)),
            "level_name": self.level_name,
        }


@dataclass(frozen=True)
class ProcessHandle:
    """
    Evidence that a server process is currently executing.

    Attributes:
        pid: OS process identifier.
        working_directory: Resolved absolute working directory of the process.
        start_time: Process creation time in seconds since the epoch.
        introspection_handle: Backend-specific reference used to fetch runtime
                              metrics, None if the process cannot be attached to.
    """

    pid: int
    working_directory: Path
    start_time: float
    introspection_handle: Optional[str] = None


@dataclass(frozen=True)
class RuntimeMetrics:
    """In-process performance counters of a running server."""

    # Step latencies are None when the process reported no recent ticks.
    avg_step_latency_ms: Optional[float]
    max_step_latency_ms: Optional[float]
    heap_used_bytes: int
    heap_max_bytes: int
    non_heap_used_bytes: int

    @classmethod
    def from_tick_times(
        cls,
        tick_times_ns: Sequence[int],
        heap_used_bytes: int,
        heap_max_bytes: int,
        non_heap_used_bytes: int,
    ) -> "RuntimeMetrics":
        """
        Build runtime metrics from raw tick durations.

        Args:
            tick_times_ns: Recent tick durations in nanoseconds. The server keeps
                           a ring buffer that may still contain zeros right after
                           start-up; those are included as reported.
            heap_used_bytes: Used heap memory.
            heap_max_bytes: Maximum heap memory (-1 if undefined).
            non_heap_used_bytes: Used non-heap memory.

        Returns:
            RuntimeMetrics with average and maximum step latency in milliseconds,
            or None for both when no samples were reported.
        """
        if tick_times_ns:
            avg = sum(tick_times_ns) / (1e6 * len(tick_times_ns))
            peak = max(tick_times_ns) / 1e6
        else:
            avg = peak = None
        return cls(
            avg_step_latency_ms=avg,
            max_step_latency_ms=peak,
            heap_used_bytes=heap_used_bytes,
            heap_max_bytes=heap_max_bytes,
            non_heap_used_bytes=non_heap_used_bytes,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avg_step_latency_ms": self.avg_step_latency_ms,
            "max_step_latency_ms": self.max_step_latency_ms,
            "heap_used_bytes": self.heap_used_bytes,
            "heap_max_bytes": self.heap_max_bytes,
            "non_heap_used_bytes": self.non_heap_used_bytes,
        }


@dataclass(frozen=True)
class LivenessMetrics:
    """Result of a fully successful status + ping exchange."""

    # Monotonic-clock nanoseconds between sending the ping and reading the pong length.
    round_trip_latency_ns: int
    version_string: str
    protocol_version: int
    players_online: int
    players_max: int

    @property
    def round_trip_latency(self) -> timedelta:
        return timedelta(microseconds=self.round_trip_latency_ns / 1e3)

    @property
    def round_trip_ms(self) -> float:
        return self.round_trip_latency_ns / 1e6

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_trip_ms": self.round_trip_ms,
            "version": self.version_string,
            "protocol_version": self.protocol_version,
            "players_online": self.players_online,
            "players_max": self.players_max,
        }


@dataclass(frozen=True)
class Offline:
    """No running process was correlated with the installation."""

    installation: Installation

    online = False

    def to_dict(self) -> Dict[str, Any]:
        return {"online": False, "installation": self.installation.to_dict()}


@dataclass(frozen=True)
class Online:
    """
    A running process was correlated with the installation.

    runtime_metrics and liveness_metrics are independently optional: either
    probe may fail without changing the classification.
    """

    installation: Installation
    pid: int
    start_time: datetime
    runtime_metrics: Optional[RuntimeMetrics] = None
    liveness_metrics: Optional[LivenessMetrics] = None

    online = True

    def uptime_seconds(self, now: Optional[datetime] = None) -> float:
        """Seconds elapsed since the process started."""
        now = now or datetime.now(timezone.utc)
        return (now - self.start_time).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "online": True,
            "installation": self.installation.to_dict(),
            "pid": self.pid,
            "start_time": self.start_time.isoformat(),
            "uptime_seconds": round(self.uptime_seconds(), 3),
            "runtime": self.runtime_metrics.to_dict() if self.runtime_metrics else None,
            "liveness": self.liveness_metrics.to_dict() if self.liveness_metrics else None,
        }


ServerStatus = Union[Offline, Online]


def start_time_from_epoch(epoch_seconds: float) -> datetime:
    """Convert a process creation timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
