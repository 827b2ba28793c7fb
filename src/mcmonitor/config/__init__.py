"""
Loading, validation and cached access for conf/config.toml.

Most callers only need get_config(); the CLI uses set_config_path() for
its --config flag.
"""

from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)

from .loader import (
    load_main_config,
    load_toml_file,
)
from .validators import (
    validate_app_config,
    validate_discovery_config,
    validate_exporter_config,
    validate_introspection_config,
    validate_probe_config,
)

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "validate_app_config",
    "validate_discovery_config",
    "validate_exporter_config",
    "validate_introspection_config",
    "validate_probe_config",
]
