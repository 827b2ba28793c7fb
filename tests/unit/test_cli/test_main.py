"""
Unit tests for the command-line interface.
"""

import json
from unittest.mock import patch

import pytest

from mcmonitor.cli.main import build_parser, main_cli


@pytest.fixture
def no_processes():
    """Report an empty process table."""
    with patch("mcmonitor.discovery.processes.psutil.process_iter", return_value=[]):
        yield


@pytest.mark.unit
class TestParser:
    """Test cases for argument parsing."""

    def test_defaults(self):
        """Test flags default to serving with configured values."""
        args = build_parser().parse_args([])

        assert args.once is False
        assert args.config is None
        assert args.root is None
        assert args.log_level is None

    def test_invalid_log_level(self):
        """Test an unknown log level is rejected by the parser."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "VERBOSE"])


@pytest.mark.unit
class TestMainCli:
    """Test cases for main_cli."""

    def test_once_prints_snapshot(self, config_file, servers_root, make_installation,
                                  no_processes, capsys):
        """Test --once prints every installation as JSON and exits 0."""
        make_installation("alpha", world_files={"level.dat": b"x" * 32})

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(config_file), "--root", str(servers_root), "--once"])

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        document = json.loads(out[out.index("{"):])
        assert document["alpha"]["online"] is False
        assert document["alpha"]["installation"]["world_size_bytes"] == 32

    def test_once_fails_on_missing_root(self, config_file, temp_dir, no_processes):
        """Test --once exits 1 when the scrape fails."""
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(config_file), "--root", str(temp_dir / "absent"), "--once"])

        assert exc_info.value.code == 1

    def test_missing_config_exits(self, temp_dir):
        """Test a missing configuration file exits with code 1."""
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["--config", str(temp_dir / "absent.toml"), "--once"])

        assert exc_info.value.code == 1

    def test_serve_starts_and_stops_exporter(self, config_file):
        """Test serve mode starts the exporter and stops it on shutdown."""
        with patch("mcmonitor.cli.main.MetricsExporter") as mock_exporter, \
                patch("mcmonitor.cli.main.threading.Event") as mock_event, \
                patch("mcmonitor.cli.main.signal.signal"):
            with pytest.raises(SystemExit) as exc_info:
                main_cli(["--config", str(config_file)])

        assert exc_info.value.code == 0
        _, kwargs = mock_exporter.call_args
        assert kwargs == {"host": "::1", "port": 9200}
        mock_exporter.return_value.start.assert_called_once()
        mock_event.return_value.wait.assert_called_once()
        mock_exporter.return_value.stop.assert_called_once()

    def test_bind_failure_exits(self, config_file):
        """Test an address that cannot be bound exits with code 1."""
        with patch("mcmonitor.cli.main.MetricsExporter") as mock_exporter, \
                patch("mcmonitor.cli.main.signal.signal"):
            mock_exporter.return_value.start.side_effect = OSError("Address already in use")
            with pytest.raises(SystemExit) as exc_info:
                main_cli(["--config", str(config_file)])

        assert exc_info.value.code == 1
