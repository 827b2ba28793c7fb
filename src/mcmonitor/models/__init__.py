"""
Data models for the mcmonitor package.

This module provides the per-scrape server entities and the
configuration dataclasses.
"""

from .config import (
    AppConfig,
    DiscoveryConfig,
    ExporterConfig,
    IntrospectionConfig,
    ProbeConfig,
)
from .server import (
    CONFIG_FILENAME,
    DEFAULT_LEVEL_NAME,
    DEFAULT_MAX_PLAYERS,
    DEFAULT_SERVER_PORT,
    Installation,
    LivenessMetrics,
    Offline,
    Online,
    ProcessHandle,
    RuntimeMetrics,
    ServerStatus,
    start_time_from_epoch,
)

__all__ = [
    # Configuration
    "AppConfig",
    "DiscoveryConfig",
    "ExporterConfig",
    "IntrospectionConfig",
    "ProbeConfig",
    # Server entities
    "CONFIG_FILENAME",
    "DEFAULT_LEVEL_NAME",
    "DEFAULT_MAX_PLAYERS",
    "DEFAULT_SERVER_PORT",
    "Installation",
    "LivenessMetrics",
    "Offline",
    "Online",
    "ProcessHandle",
    "RuntimeMetrics",
    "ServerStatus",
    "start_time_from_epoch",
]
