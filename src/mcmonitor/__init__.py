"""
mcmonitor: health metrics exporter for locally hosted Minecraft servers.

This package discovers server installations on disk, correlates them with
running server processes, probes each running server, and exposes the
result as Prometheus metrics.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Server entities and configuration data structures
- validation: Input validation and error handling
- protocol: Varint codec and the server list ping client
- discovery: Installation scanning and process discovery
- introspection: Runtime metric backends (Jolokia)
- aggregation: Online/Offline classification and probing
- exposition: Prometheus collector and HTTP exporter
- cli: Command-line interface

Usage:
    From command line:
        mcmonitor --once

    Programmatically:
        from mcmonitor import StatusAggregator, get_config
        aggregator = StatusAggregator.from_config(get_config())
        statuses = aggregator.snapshot()
"""

from .config import get_config, clear_config_cache, set_config_path
from .aggregation import StatusAggregator
from .discovery import InstallationScanner, ProcessDiscovery
from .exposition import MetricsExporter, StatusCollector
from .introspection import JolokiaIntrospector, NullIntrospector, RuntimeIntrospector
from .protocol import LivenessProtocolClient

from .models import (
    AppConfig,
    Installation,
    LivenessMetrics,
    Offline,
    Online,
    ProcessHandle,
    RuntimeMetrics,
    ServerStatus,
)

from .validation import ValidationError

__version__ = "1.0.2"

__all__ = [
    # Configuration
    "get_config",
    "clear_config_cache",
    "set_config_path",
    # Components
    "StatusAggregator",
    "InstallationScanner",
    "ProcessDiscovery",
    "LivenessProtocolClient",
    "RuntimeIntrospector",
    "JolokiaIntrospector",
    "NullIntrospector",
    "StatusCollector",
    "MetricsExporter",
    # Models
    "AppConfig",
    "Installation",
    "LivenessMetrics",
    "Offline",
    "Online",
    "ProcessHandle",
    "RuntimeMetrics",
    "ServerStatus",
    # Validation
    "ValidationError",
]
