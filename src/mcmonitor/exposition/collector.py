"""
Prometheus exposition of server statuses.

StatusCollector renders one aggregator snapshot per scrape as gauge
families labelled by server name.

Absent-field policy: a series is omitted for a server whenever the field
it comes from is absent (Offline servers, failed probes, no tick samples).
``online`` and ``world_size`` are always emitted. For Offline servers
``players_max`` falls back to ``max-players`` from server.properties.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Mapping, Optional

from prometheus_client.metrics_core import GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from ..models.server import Offline, ServerStatus

logger = logging.getLogger(__name__)

METRIC_PREFIX = "net_minecraft_server"

# (suffix, help text)
METRIC_FAMILIES = [
    ("online", "Is the server online?"),
    ("uptime", "Uptime of the server [s]"),
    ("world_size", "Size of the world [bytes]"),
    ("mspt_avg", "Average MSPT [ms]"),
    ("mspt_max", "Maximum MSPT [ms]"),
    ("heap_used", "Heap memory usage of the Minecraft server [bytes]"),
    ("heap_max", "Maximum heap memory of the Minecraft server [bytes]"),
    ("non_heap_used", "Non-heap memory usage of the Minecraft server [bytes]"),
    ("players", "Number of players on the server"),
    ("players_max", "Maximum number of players on the server"),
    ("protocol_version", "Protocol version"),
    ("ping", "Ping of the server [ms]"),
]


class StatusCollector(Collector):
    """
    Custom collector producing server gauges from a snapshot source.

    Args:
        snapshot_source: Callable returning the current name -> status mapping,
                         typically ``StatusAggregator.snapshot``.
        clock: Returns the current aware datetime, used for uptime.
    """

    def __init__(
        self,
        snapshot_source: Callable[[], Mapping[str, ServerStatus]],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._snapshot_source = snapshot_source
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def describe(self) -> Iterable[Metric]:
        # Registration must not trigger a scrape.
        return []

    def collect(self) -> Iterable[Metric]:
        try:
            statuses = self._snapshot_source()
        except Exception:
            logger.exception("Scrape failed; no samples exposed")
            raise

        families = self._new_families()
        now = self._clock()
        for server in sorted(statuses):
            self._add_samples(families, server, statuses[server], now)
        return list(families.values())

    @staticmethod
    def _new_families() -> Dict[str, GaugeMetricFamily]:
        return {
            suffix: GaugeMetricFamily(f"{METRIC_PREFIX}_{suffix}", documentation, labels=["server"])
            for suffix, documentation in METRIC_FAMILIES
        }

    @staticmethod
    def _add_samples(
        families: Dict[str, GaugeMetricFamily],
        server: str,
        status: ServerStatus,
        now: datetime,
    ) -> None:
        labels = [server]

        def add(suffix: str, value: Optional[float]) -> None:
            if value is not None:
                families[suffix].add_metric(labels, float(value))

        add("online", 1.0 if status.online else 0.0)
        add("world_size", status.installation.world_size_bytes)

        if isinstance(status, Offline):
            add("players_max", status.installation.max_players)
            return

        add("uptime", status.uptime_seconds(now))

        runtime = status.runtime_metrics
        if runtime is not None:
            add("mspt_avg", runtime.avg_step_latency_ms)
            add("mspt_max", runtime.max_step_latency_ms)
            add("heap_used", runtime.heap_used_bytes)
            add("heap_max", runtime.heap_max_bytes)
            add("non_heap_used", runtime.non_heap_used_bytes)

        liveness = status.liveness_metrics
        if liveness is not None:
            add("players", liveness.players_online)
            add("players_max", liveness.players_max)
            add("protocol_version", liveness.protocol_version)
            add("ping", liveness.round_trip_ms)
