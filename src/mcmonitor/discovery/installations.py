"""
Installation scanning.

An installation is a directory holding a server.properties file. The
scanner lists the immediate subdirectories of a root directory and loads
the static facts of each installation: its properties and the size of its
world directory.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from ..models.server import CONFIG_FILENAME, DEFAULT_LEVEL_NAME, Installation
from ..validation import ErrorSeverity, handle_file_error
from .disk import get_disk_usage
from .properties import read_properties

logger = logging.getLogger(__name__)


def resolve_directory(directory: Path) -> Path:
    """Absolute, symlink-free form of a directory path, used as correlation key."""
    return Path(directory).expanduser().resolve()


class InstallationScanner:
    """
    Enumerates installations below a root directory.

    Nothing is cached between calls; every scan re-reads properties and
    re-measures world sizes.
    """

    def __init__(self, config_filename: str = CONFIG_FILENAME):
        self.config_filename = config_filename

    def scan(self, root_directory: Path) -> Dict[Path, Installation]:
        """
        Load every installation directly below root_directory.

        Subdirectories without a configuration file are skipped. An empty
        root yields an empty mapping.

        Args:
            root_directory: Directory whose immediate children are candidates.

        Returns:
            Mapping of resolved installation path to Installation, in path order.

        Raises:
            OSError: If the root cannot be listed or an installation cannot be read.
        """
        root = Path(root_directory).expanduser()
        try:
            candidates = sorted(root.iterdir())
        except OSError as e:
            handle_file_error(
                error=e,
                context=f"listing servers root {root}",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )
            raise

        installations: Dict[Path, Installation] = {}
        for candidate in candidates:
            if not candidate.is_dir():
                continue
            installation = self.load_installation(candidate)
            if installation is None:
                logger.debug(f"Skipping {candidate}: no {self.config_filename}")
                continue
            installations[installation.path] = installation

        logger.debug(f"Found {len(installations)} installation(s) under {root}")
        return installations

    def load_installation(self, directory: Path) -> Optional[Installation]:
        """
        Load a single installation directory.

        Args:
            directory: Directory expected to contain the configuration file.

        Returns:
            The Installation, or None if the directory has no configuration file.

        Raises:
            OSError: If the configuration file or world directory cannot be read.
        """
        path = resolve_directory(directory)
        properties = read_properties(path / self.config_filename)
        if properties is None:
            return None

        level_name = properties.get("level-name") or DEFAULT_LEVEL_NAME
        world_size = get_disk_usage(path / level_name)
        return Installation(path=path, properties=properties, world_size_bytes=world_size)
