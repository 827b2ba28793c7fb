"""
Status aggregation.

This module merges the installations found on disk with the running
processes found in the process table into one status entity per server,
and enriches Online servers with runtime and liveness probe results.

One scrape runs in three phases:
1. every installation is seeded as Offline;
2. every process is correlated with an installation by working directory
   and its entry is replaced with Online;
3. Online servers are probed. Probe failures leave the corresponding
   optional field empty and never change the classification.
"""

import dataclasses
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..discovery.installations import InstallationScanner
from ..discovery.processes import ProcessDiscovery
from ..introspection import RuntimeIntrospector, create_introspector
from ..models.config import AppConfig
from ..models.server import (
    Installation,
    Offline,
    Online,
    ProcessHandle,
    ServerStatus,
    start_time_from_epoch,
)
from ..protocol.client import LivenessProtocolClient
from ..validation import ErrorSeverity, handle_error, handle_file_error, handle_probe_error

logger = logging.getLogger(__name__)


class StatusAggregator:
    """
    Produces the per-server status snapshot for one scrape.

    Attributes:
        servers_root: Directory scanned for installations.
        probe_host: Host the liveness probe connects to.
        probe_timeout: Deadline in seconds for the liveness probe.
        max_workers: Probe parallelism; 1 probes sequentially.
    """

    def __init__(
        self,
        scanner: InstallationScanner,
        discovery: ProcessDiscovery,
        introspector: RuntimeIntrospector,
        liveness_client: LivenessProtocolClient,
        servers_root: Path,
        probe_host: str = "localhost",
        probe_timeout: Optional[float] = None,
        max_workers: int = 1,
        thread_name_prefix: str = "ProbeWorker",
    ):
        self.scanner = scanner
        self.discovery = discovery
        self.introspector = introspector
        self.liveness_client = liveness_client
        self.servers_root = Path(servers_root)
        self.probe_host = probe_host
        self.probe_timeout = probe_timeout
        self.max_workers = max(1, max_workers)
        self.thread_name_prefix = thread_name_prefix

    @classmethod
    def from_config(cls, config: AppConfig) -> "StatusAggregator":
        """Wire an aggregator and its collaborators from validated configuration."""
        introspector = create_introspector(config.introspection)
        return cls(
            scanner=InstallationScanner(),
            discovery=ProcessDiscovery(
                service_account=config.discovery.service_account,
                runtime_prefix=config.discovery.runtime_prefix,
                introspector=introspector,
            ),
            introspector=introspector,
            liveness_client=LivenessProtocolClient(timeout=config.probe.timeout_seconds),
            servers_root=config.discovery.servers_root,
            probe_host=config.probe.host,
            probe_timeout=config.probe.timeout_seconds,
            max_workers=config.probe.max_workers,
            thread_name_prefix=config.probe.thread_name_prefix,
        )

    def snapshot(self) -> Dict[str, ServerStatus]:
        """
        Run one full scrape: scan, discover, aggregate.

        Returns:
            Mapping of server name to status, in name order.

        Raises:
            OSError: If the servers root cannot be scanned.
            psutil.Error: If the process table cannot be enumerated.
        """
        started = time.monotonic()
        try:
            installations = self.scanner.scan(self.servers_root)
            processes = self.discovery.list_candidates()
        except Exception as e:
            handle_error(
                error=e,
                context="scrape enumeration",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )
            raise

        statuses = self.aggregate(installations, processes)

        online = sum(1 for status in statuses.values() if status.online)
        logger.info(
            f"Scrape finished in {time.monotonic() - started:.3f}s: "
            f"{online} online, {len(statuses) - online} offline"
        )
        return statuses

    def aggregate(
        self,
        installations: Mapping[Path, Installation],
        processes: Iterable[ProcessHandle],
    ) -> Dict[str, ServerStatus]:
        """
        Merge installations and running processes into server statuses.

        Correlation is strictly by working directory, never by pid. All
        servers are classified before any probe is issued.

        Args:
            installations: Installations keyed by resolved directory path.
            processes: Running server processes.

        Returns:
            Mapping of installation leaf name to status, in name order. Two
            installations sharing a leaf name collide; the later path wins.
        """
        statuses: Dict[Path, ServerStatus] = {
            path: Offline(installation) for path, installation in installations.items()
        }

        matched = self._correlate(installations, processes)
        pending: List[Tuple[Online, ProcessHandle]] = []
        for installation, handle in matched:
            status = Online(
                installation=installation,
                pid=handle.pid,
                start_time=start_time_from_epoch(handle.start_time),
            )
            statuses[installation.path] = status
            pending.append((status, handle))

        for status in self._probe_all(pending):
            statuses[status.installation.path] = status

        by_name: Dict[str, ServerStatus] = {}
        for path in sorted(statuses):
            by_name[path.name] = statuses[path]
        return dict(sorted(by_name.items()))

    def _correlate(
        self,
        installations: Mapping[Path, Installation],
        processes: Iterable[ProcessHandle],
    ) -> List[Tuple[Installation, ProcessHandle]]:
        """Pair each process with its installation, rescanning unknown directories."""
        matched: Dict[Path, Tuple[Installation, ProcessHandle]] = {}

        for handle in sorted(processes, key=lambda h: h.pid):
            installation = installations.get(handle.working_directory)
            if installation is None:
                installation = self._rescan(handle)
                if installation is None:
                    logger.debug(
                        f"Dropping pid {handle.pid}: {handle.working_directory} "
                        f"is not an installation"
                    )
                    continue

            if installation.path in matched:
                logger.warning(
                    f"Ignoring pid {handle.pid}: installation {installation.path} already "
                    f"matched pid {matched[installation.path][1].pid}"
                )
                continue
            matched[installation.path] = (installation, handle)

        return [matched[path] for path in sorted(matched)]

    def _rescan(self, handle: ProcessHandle) -> Optional[Installation]:
        try:
            return self.scanner.load_installation(handle.working_directory)
        except OSError as e:
            handle_file_error(
                error=e,
                context=f"loading installation of pid {handle.pid}",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            return None

    def _probe_all(self, pending: List[Tuple[Online, ProcessHandle]]) -> List[Online]:
        if self.max_workers == 1 or len(pending) <= 1:
            return [self._probe(status, handle) for status, handle in pending]

        workers = min(self.max_workers, len(pending))
        with ThreadPoolExecutor(
            max_workers=workers,
            thread_name_prefix=self.thread_name_prefix,
        ) as executor:
            futures = [executor.submit(self._probe, status, handle) for status, handle in pending]
            return [future.result() for future in futures]

    def _probe(self, status: Online, handle: ProcessHandle) -> Online:
        """Run both probes for one server. Never raises for probe failures."""
        name = status.installation.name

        runtime_metrics = None
        if handle.introspection_handle is not None:
            try:
                runtime_metrics = self.introspector.fetch(handle.introspection_handle)
            except Exception as e:
                handle_probe_error(e, f"runtime introspection of {name} (pid {handle.pid})",
                                   logger=logger)

        liveness_metrics = None
        try:
            address = (self.probe_host, status.installation.server_port)
            liveness_metrics = self.liveness_client.probe(address, self.probe_timeout)
        except Exception as e:
            handle_probe_error(e, f"liveness of {name} (pid {handle.pid})", logger=logger)

        return dataclasses.replace(
            status,
            runtime_metrics=runtime_metrics,
            liveness_metrics=liveness_metrics,
        )
