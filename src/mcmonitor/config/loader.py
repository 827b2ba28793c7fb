"""
Reading of the exporter's TOML configuration file.

Only parsing happens here; turning the parsed document into typed
settings is the job of ``validators``.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Parse one TOML document from disk.

    Args:
        file_path: Location of the document
        description: Name used for the document in log messages

    Returns:
        The parsed document; an empty file yields an empty dict

    Raises:
        FileNotFoundError: If nothing exists at file_path
        tomllib.TOMLDecodeError: If the document is not valid TOML
    """
    path = Path(file_path).expanduser()
    logger.info(f"Reading {description}: {path}")

    if not path.is_file():
        raise FileNotFoundError(f"{description} not found: {path}")

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            handle_config_error(
                error=e,
                context=f"parsing {description} {path}",
                severity=ErrorSeverity.CRITICAL,
                reraise=True,
                logger=logger,
            )
            raise


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """Parse config.toml, the single configuration file of the exporter."""
    return load_toml_file(config_path, "exporter configuration")
