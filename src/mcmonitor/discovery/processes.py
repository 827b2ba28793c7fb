"""
Running server process discovery using the 'psutil' library.

This module provides the ProcessDiscovery class, which walks the process
table and keeps processes that are owned by the service account, run the
Java runtime and have an installation directory as working directory.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Set

import psutil

from ..introspection.base import RuntimeIntrospector
from ..models.server import CONFIG_FILENAME, ProcessHandle

logger = logging.getLogger(__name__)

# Failures while inspecting a single process; each drops that process only.
INSPECTION_ERRORS = (
    psutil.NoSuchProcess,
    psutil.AccessDenied,
    psutil.ZombieProcess,
    PermissionError,
)


class ProcessDiscovery:
    """
    Finds running server processes.

    Filters are applied in order and short-circuit: ownership, executable
    name, then presence of the configuration file in the working directory.
    A process that fails a filter or cannot be inspected is omitted without
    raising.

    Attributes:
        service_account: User name that must own the process.
        runtime_prefix: Prefix of the executable base name (e.g. "java").
        introspector: Backend asked for an introspection handle per process.
    """

    def __init__(
        self,
        service_account: str = "minecraft",
        runtime_prefix: str = "java",
        introspector: Optional[RuntimeIntrospector] = None,
        config_filename: str = CONFIG_FILENAME,
    ):
        self.service_account = service_account
        self.runtime_prefix = runtime_prefix
        self.introspector = introspector
        self.config_filename = config_filename

    def list_candidates(self) -> Set[ProcessHandle]:
        """
        Enumerate running server processes.

        At most one handle is kept per working directory; when several
        processes share one, the lowest pid wins and a warning is logged.

        Returns:
            Set of ProcessHandle, one per distinct working directory.

        Raises:
            psutil.Error: If the process table itself cannot be enumerated.
        """
        by_directory: Dict[Path, ProcessHandle] = {}

        for proc in psutil.process_iter():
            handle = self._inspect(proc)
            if handle is None:
                continue

            existing = by_directory.get(handle.working_directory)
            if existing is not None:
                logger.warning(
                    f"Processes {existing.pid} and {handle.pid} share working directory "
                    f"{handle.working_directory}; keeping {existing.pid}"
                )
                continue
            by_directory[handle.working_directory] = handle

        logger.debug(f"Discovered {len(by_directory)} running server process(es)")
        return set(by_directory.values())

    def _inspect(self, proc: psutil.Process) -> Optional[ProcessHandle]:
        """Apply the filters to one process, returning a handle if it passes all of them."""
        try:
            with proc.oneshot():
                if proc.username() != self.service_account:
                    return None

                executable = proc.exe()
                if not executable or not Path(executable).name.startswith(self.runtime_prefix):
                    return None

                cwd = proc.cwd()
                if not cwd or not (Path(cwd) / self.config_filename).is_file():
                    return None

                start_time = proc.create_time()
        except INSPECTION_ERRORS as e:
            logger.debug(f"Skipping pid {proc.pid}: {type(e).__name__}")
            return None

        return ProcessHandle(
            pid=proc.pid,
            working_directory=Path(cwd),
            start_time=start_time,
            introspection_handle=self._resolve_introspection_handle(proc),
        )

    def _resolve_introspection_handle(self, proc: psutil.Process) -> Optional[str]:
        if self.introspector is None:
            return None
        try:
            return self.introspector.resolve_handle(proc)
        except Exception as e:
            logger.debug(f"No introspection handle for pid {proc.pid}: {e}")
            return None
