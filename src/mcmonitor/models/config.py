"""
Configuration data models.

This module contains the configuration data structures for discovery,
probing, runtime introspection, the exporter endpoint and logging.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class DiscoveryConfig:
    """
    Where to look for installations and which processes count as servers,
    loaded from `[monitor.discovery]`.
    """

    # Directory whose immediate subdirectories are candidate installations.
    servers_root: Path = field(default_factory=lambda: Path("~").expanduser())
    # Account that owns the server processes.
    service_account: str = "minecraft"
    # Executable base names starting with this prefix are treated as the runtime.
    runtime_prefix: str = "java"


@dataclass
class ProbeConfig:
    """
    Settings for the liveness probe, loaded from `[monitor.probe]`.
    """

    host: str = "localhost"
    # Applies to connect and to every read of the exchange.
    timeout_seconds: float = 1.0
    # Values above 1 probe servers in parallel on a thread pool.
    max_workers: int = 1
    thread_name_prefix: str = "ProbeWorker"


@dataclass
class IntrospectionConfig:
    """
    Settings for runtime introspection, loaded from `[monitor.introspection]`.
    """

    # "jolokia" or "none"
    backend: str = "jolokia"
    timeout_seconds: float = 2.0
    # Port assumed when the agent options do not name one.
    default_port: int = 8778


@dataclass
class ExporterConfig:
    """
    HTTP endpoint for metric exposition, loaded from `[exporter]`.
    """

    host: str = "::1"
    port: int = 9200


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    introspection: IntrospectionConfig = field(default_factory=IntrospectionConfig)
    exporter: ExporterConfig = field(default_factory=ExporterConfig)
    log_level: str = "INFO"
