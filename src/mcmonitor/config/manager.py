"""
Cached access to the exporter configuration.

The first get_config() call reads and validates config.toml; later calls
return the same AppConfig until the cache is cleared or the path changes.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import AppConfig
from ..validation import ErrorSeverity, handle_config_error
from .loader import load_main_config
from .validators import validate_app_config

logger = logging.getLogger(__name__)

_CONFIG: Optional[AppConfig] = None

# <repo>/conf/config.toml; replaced by the CLI --config flag and by tests.
_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"


def set_config_path(config_path: Path) -> None:
    """
    Point the configuration at another file.

    The cached configuration is dropped, so the next get_config() reads
    the new file.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.debug(f"Configuration path is now {_CONFIG_FILE_PATH}")


def clear_config_cache() -> None:
    """Forget the loaded configuration; the file is re-read on next access."""
    global _CONFIG
    _CONFIG = None


def _load_config(config_path: Path) -> AppConfig:
    """
    Read and validate config.toml.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If a setting is invalid
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    try:
        app_config = validate_app_config(load_main_config(config_path))
    except Exception as e:
        handle_config_error(
            error=e,
            context=f"loading {config_path}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger,
        )
        raise

    logger.info(
        f"Configuration loaded: servers root {app_config.discovery.servers_root}, "
        f"introspection {app_config.introspection.backend}, "
        f"exporter [{app_config.exporter.host}]:{app_config.exporter.port}"
    )
    return app_config


def get_config() -> AppConfig:
    """
    Return the validated configuration, loading it on first use.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If a setting is invalid
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    return _CONFIG is not None


def get_config_info() -> Dict[str, Any]:
    """Describe where the configuration comes from and whether it is loaded."""
    return {
        "config_path": str(_CONFIG_FILE_PATH),
        "config_exists": _CONFIG_FILE_PATH.is_file(),
        "is_loaded": is_config_loaded(),
    }
