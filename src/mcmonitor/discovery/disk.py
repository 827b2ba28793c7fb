"""
Recursive disk usage of world directories.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def get_disk_usage(path: Path) -> int:
    """
    Sum the sizes of every file below a directory.

    Symbolic links are counted by their own size and never followed.
    Entries that disappear during the walk (a world save in progress)
    are skipped.

    Args:
        path: Directory (or single file) to measure.

    Returns:
        Total size in bytes, 0 if the path does not exist.

    Raises:
        OSError: For failures other than entries vanishing mid-walk.
    """
    try:
        root_stat = os.lstat(path)
    except FileNotFoundError:
        return 0
    if not os.path.isdir(path) or os.path.islink(path):
        return root_stat.st_size

    total = 0
    pending = [os.fspath(path)]
    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            pending.append(entry.path)
                        else:
                            total += entry.stat(follow_symlinks=False).st_size
                    except FileNotFoundError:
                        logger.debug(f"Entry vanished while measuring: {entry.path}")
        except FileNotFoundError:
            logger.debug(f"Directory vanished while measuring: {current}")
    return total
