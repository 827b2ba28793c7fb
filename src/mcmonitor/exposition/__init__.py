"""
Metric exposition of server status snapshots.
"""

from .collector import METRIC_FAMILIES, METRIC_PREFIX, StatusCollector
from .server import MetricsExporter

__all__ = [
    "METRIC_FAMILIES",
    "METRIC_PREFIX",
    "MetricsExporter",
    "StatusCollector",
]
