"""
HTTP endpoint serving the metrics of a StatusCollector.

The exporter owns its registry; nothing is registered in the
prometheus_client default registry.
"""

import logging
import threading
from typing import Optional

from prometheus_client import CollectorRegistry, start_http_server
from prometheus_client.registry import Collector

logger = logging.getLogger(__name__)


class MetricsExporter:
    """
    Serves one collector over HTTP on a background thread.

    Attributes:
        registry: Registry holding only this exporter's collector.
    """

    def __init__(self, collector: Collector, host: str = "::1", port: int = 9200):
        self.host = host
        self.port = port
        self.registry = CollectorRegistry(auto_describe=False)
        self.registry.register(collector)
        self._server = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound, useful when started with port 0."""
        if self._server is None:
            return None
        return self._server.server_port

    def start(self) -> None:
        """
        Start serving.

        Raises:
            RuntimeError: If the exporter is already running.
            OSError: If the address cannot be bound.
        """
        if self._server is not None:
            raise RuntimeError("Exporter already started")
        self._server, self._thread = start_http_server(
            self.port, addr=self.host, registry=self.registry
        )
        logger.info(f"Listening on [{self.host}]:{self.bound_port}")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop serving and wait for the server thread to exit."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        self._server = None
        self._thread = None
        logger.info("Exporter stopped")
