"""
Configuration validation utilities.

This module turns the raw TOML sections into validated configuration
dataclasses. Missing keys fall back to the dataclass defaults; present
keys with invalid values raise ValidationError naming the field.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import (
    AppConfig,
    DiscoveryConfig,
    ExporterConfig,
    IntrospectionConfig,
    ProbeConfig,
)
from ..validation import (
    ValidationError,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

INTROSPECTION_BACKENDS = ["jolokia", "none"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValidationError(f"[{name}] must be a table", field_name=name, value=section)
    return section


def validate_discovery_config(discovery_data: Dict[str, Any]) -> DiscoveryConfig:
    """
    Validate and create a DiscoveryConfig from raw configuration data.

    Args:
        discovery_data: Raw `[monitor.discovery]` table

    Returns:
        Validated DiscoveryConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = DiscoveryConfig()

    servers_root = discovery_data.get("servers_root")
    if servers_root is None:
        root_path = defaults.servers_root
    else:
        root_path = Path(
            validate_non_empty_string(servers_root, "monitor.discovery.servers_root")
        ).expanduser()

    service_account = validate_non_empty_string(
        discovery_data.get("service_account", defaults.service_account),
        "monitor.discovery.service_account",
    )
    runtime_prefix = validate_non_empty_string(
        discovery_data.get("runtime_prefix", defaults.runtime_prefix),
        "monitor.discovery.runtime_prefix",
    )

    return DiscoveryConfig(
        servers_root=root_path,
        service_account=service_account,
        runtime_prefix=runtime_prefix,
    )


def validate_probe_config(probe_data: Dict[str, Any]) -> ProbeConfig:
    """
    Validate and create a ProbeConfig from raw configuration data.

    Args:
        probe_data: Raw `[monitor.probe]` table

    Returns:
        Validated ProbeConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = ProbeConfig()

    host = validate_non_empty_string(
        probe_data.get("host", defaults.host), "monitor.probe.host"
    )
    timeout_seconds = validate_positive_float(
        probe_data.get("timeout_seconds", defaults.timeout_seconds),
        min_value=0.05,  # 50ms minimum
        max_value=30.0,
        field_name="monitor.probe.timeout_seconds",
    )
    max_workers = validate_positive_integer(
        probe_data.get("max_workers", defaults.max_workers),
        min_value=1,
        max_value=64,
        field_name="monitor.probe.max_workers",
    )
    thread_name_prefix = validate_non_empty_string(
        probe_data.get("thread_name_prefix", defaults.thread_name_prefix),
        "monitor.probe.thread_name_prefix",
    )

    return ProbeConfig(
        host=host,
        timeout_seconds=timeout_seconds,
        max_workers=max_workers,
        thread_name_prefix=thread_name_prefix,
    )


def validate_introspection_config(introspection_data: Dict[str, Any]) -> IntrospectionConfig:
    """
    Validate and create an IntrospectionConfig from raw configuration data.

    Raises:
        ValidationError: If validation fails
    """
    defaults = IntrospectionConfig()

    backend = validate_enum_choice(
        introspection_data.get("backend", defaults.backend),
        valid_choices=INTROSPECTION_BACKENDS,
        field_name="monitor.introspection.backend",
        case_sensitive=False,
    )
    timeout_seconds = validate_positive_float(
        introspection_data.get("timeout_seconds", defaults.timeout_seconds),
        min_value=0.05,
        max_value=60.0,
        field_name="monitor.introspection.timeout_seconds",
    )
    default_port = validate_positive_integer(
        introspection_data.get("default_port", defaults.default_port),
        min_value=1,
        max_value=65535,
        field_name="monitor.introspection.default_port",
    )

    if backend == "none":
        logger.info("Runtime introspection disabled; runtime metrics will not be collected")

    return IntrospectionConfig(
        backend=backend,
        timeout_seconds=timeout_seconds,
        default_port=default_port,
    )


def validate_exporter_config(exporter_data: Dict[str, Any]) -> ExporterConfig:
    """
    Validate and create an ExporterConfig from raw configuration data.

    Raises:
        ValidationError: If validation fails
    """
    defaults = ExporterConfig()

    host = validate_non_empty_string(
        exporter_data.get("host", defaults.host), "exporter.host"
    )
    port = validate_positive_integer(
        exporter_data.get("port", defaults.port),
        min_value=1,
        max_value=65535,
        field_name="exporter.port",
    )
    return ExporterConfig(host=host, port=port)


def validate_app_config(config_data: Dict[str, Any]) -> AppConfig:
    """
    Validate a complete parsed config.toml.

    Args:
        config_data: Parsed TOML document

    Returns:
        Validated AppConfig instance

    Raises:
        ValidationError: If any section fails validation
    """
    monitor_data = _section(config_data, "monitor")

    discovery = validate_discovery_config(_section(monitor_data, "discovery"))
    probe = validate_probe_config(_section(monitor_data, "probe"))
    introspection = validate_introspection_config(_section(monitor_data, "introspection"))
    exporter = validate_exporter_config(_section(config_data, "exporter"))

    log_level = validate_enum_choice(
        _section(config_data, "logging").get("level", "INFO"),
        valid_choices=LOG_LEVELS,
        field_name="logging.level",
        case_sensitive=False,
    )

    return AppConfig(
        discovery=discovery,
        probe=probe,
        introspection=introspection,
        exporter=exporter,
        log_level=log_level,
    )
