"""
Pytest configuration and shared fixtures for the mcmonitor test suite.

This module provides common fixtures, test utilities, and configuration
for all test modules in the mcmonitor project.
"""

import json
import shutil
import socket
import sys
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mcmonitor.protocol.client import build_frame, encode_string  # noqa: E402
from mcmonitor.protocol.errors import TruncatedStream  # noqa: E402
from mcmonitor.protocol.varint import read_varint  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path).resolve()
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def servers_root(temp_dir):
    """Empty servers root directory."""
    root = temp_dir / "servers"
    root.mkdir()
    return root


@pytest.fixture
def make_installation(servers_root):
    """
    Factory creating an installation directory below servers_root.

    Usage:
        path = make_installation("alpha", {"server-port": "25566"},
                                 world_files={"region/r.0.0.mca": b"x" * 10})
    """

    def _make(
        name: str,
        properties: Optional[Dict[str, str]] = None,
        world_files: Optional[Dict[str, bytes]] = None,
        level_name: str = "world",
    ) -> Path:
        directory = servers_root / name
        directory.mkdir()
        lines = [f"{key}={value}" for key, value in (properties or {}).items()]
        (directory / "server.properties").write_text(
            "#Minecraft server properties\n" + "\n".join(lines) + "\n",
            encoding="iso-8859-1",
        )
        for relative, content in (world_files or {}).items():
            target = directory / level_name / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        return directory

    return _make


@pytest.fixture
def sample_config_data() -> Dict[str, Any]:
    """Sample configuration data for testing."""
    return {
        "monitor": {
            "discovery": {
                "servers_root": "/srv/minecraft",
                "service_account": "minecraft",
                "runtime_prefix": "java",
            },
            "probe": {
                "host": "localhost",
                "timeout_seconds": 1.0,
                "max_workers": 4,
                "thread_name_prefix": "ProbeWorker",
            },
            "introspection": {
                "backend": "jolokia",
                "timeout_seconds": 2.0,
                "default_port": 8778,
            },
        },
        "exporter": {"host": "::1", "port": 9200},
        "logging": {"level": "INFO"},
    }


@pytest.fixture
def config_file(temp_dir, sample_config_data):
    """Write sample_config_data to a temporary config.toml."""
    import toml

    config_path = temp_dir / "config.toml"
    with open(config_path, "w") as f:
        toml.dump(sample_config_data, f)
    return config_path


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield  # Run the test

    from mcmonitor.config import clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(original_config_path)


# ============================================================================
# Fake Server Fixtures
# ============================================================================


DEFAULT_STATUS_DOCUMENT = {
    "version": {"name": "1.20.1", "protocol": 763},
    "players": {"max": 20, "online": 3, "sample": []},
    "description": {"text": "A Minecraft Server"},
}


class FakeStatusServer:
    """
    Loopback server answering the status + ping exchange.

    Modes:
        ok: answer both round trips correctly.
        bad_sentinel: answer the ping with a zero payload.
        wrong_status_id: answer the status request with packet id 0x05.
        close_before_pong: read the ping, then close without answering.
        silent: read the requests and never answer.
        raw: send ``raw_status`` bytes verbatim as the status frame.
    """

    def __init__(self, mode: str = "ok", status_document: Optional[Dict[str, Any]] = None,
                 raw_status: Optional[bytes] = None):
        self.mode = mode
        self.status_document = status_document or DEFAULT_STATUS_DOCUMENT
        self.raw_status = raw_status
        self.connections = 0
        self._stop = threading.Event()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(8)
        self._sock.settimeout(0.05)
        self.address = self._sock.getsockname()
        self._thread = threading.Thread(target=self._serve, name="FakeStatusServer", daemon=True)

    def start(self) -> "FakeStatusServer":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()
        self._thread.join(timeout=5)
        self._sock.close()

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except TimeoutError:
                continue
            except OSError:
                return
            conn.settimeout(5)
            self.connections += 1
            with conn, conn.makefile("rb") as reader:
                try:
                    self._handle(conn, reader)
                except (OSError, TruncatedStream):
                    pass

    @staticmethod
    def _read_frame(reader) -> bytes:
        length = read_varint(reader)
        return reader.read(length)

    def _handle(self, conn: socket.socket, reader) -> None:
        self._read_frame(reader)  # handshake
        self._read_frame(reader)  # status request

        if self.mode == "silent":
            reader.read(1)
            return
        if self.mode == "raw":
            conn.sendall(self.raw_status)
            return

        payload = encode_string(json.dumps(self.status_document))
        status_id = 0x05 if self.mode == "wrong_status_id" else 0x00
        conn.sendall(build_frame(status_id, payload))
        ping = self._read_frame(reader)
        if self.mode == "close_before_pong":
            return
        echoed = ping[1:]
        if self.mode == "bad_sentinel":
            echoed = bytes(8)
        conn.sendall(build_frame(0x01, echoed))


@pytest.fixture
def status_server():
    """
    Factory starting FakeStatusServer instances, stopped after the test.

    Usage:
        server = status_server("bad_sentinel")
        client.probe(server.address)
    """
    started = []

    def _start(mode: str = "ok", **kwargs) -> FakeStatusServer:
        server = FakeStatusServer(mode, **kwargs).start()
        started.append(server)
        return server

    yield _start

    for server in started:
        server.stop()
