"""
Unit tests for installation scanning and disk usage.
"""

import errno
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from mcmonitor.discovery.disk import get_disk_usage
from mcmonitor.discovery.installations import InstallationScanner, resolve_directory
from mcmonitor.discovery.properties import read_properties


@pytest.mark.unit
class TestGetDiskUsage:
    """Test cases for get_disk_usage."""

    def test_missing_path(self, temp_dir):
        """Test a missing directory measures 0."""
        assert get_disk_usage(temp_dir / "absent") == 0

    def test_sums_nested_files(self, temp_dir):
        """Test sizes of files in nested directories are summed."""
        (temp_dir / "region").mkdir()
        (temp_dir / "level.dat").write_bytes(b"x" * 100)
        (temp_dir / "region" / "r.0.0.mca").write_bytes(b"x" * 4096)

        assert get_disk_usage(temp_dir) == 4196

    def test_symlinks_not_followed(self, temp_dir):
        """Test a symlink counts its own size, not its target."""
        world = temp_dir / "world"
        world.mkdir()
        big = temp_dir / "big.bin"
        big.write_bytes(b"x" * 10_000)
        os.symlink(big, world / "link")

        assert get_disk_usage(world) == os.lstat(world / "link").st_size

    def test_vanishing_entry_skipped(self, temp_dir):
        """Test an entry that disappears mid-walk is skipped."""
        (temp_dir / "kept").write_bytes(b"x" * 10)
        (temp_dir / "gone").write_bytes(b"x" * 10)
        real_scandir = os.scandir

        class VanishingEntry:
            def __init__(self, entry):
                self._entry = entry
                self.path = entry.path

            def is_dir(self, follow_symlinks=True):
                return self._entry.is_dir(follow_symlinks=follow_symlinks)

            def stat(self, follow_symlinks=True):
                if self._entry.name == "gone":
                    raise FileNotFoundError(self.path)
                return self._entry.stat(follow_symlinks=follow_symlinks)

        class WrappedScandir:
            def __init__(self, path):
                self._iterator = real_scandir(path)

            def __enter__(self):
                return (VanishingEntry(entry) for entry in self._iterator)

            def __exit__(self, *exc_info):
                self._iterator.close()

        with patch("mcmonitor.discovery.disk.os.scandir", WrappedScandir):
            assert get_disk_usage(temp_dir) == 10


@pytest.mark.unit
class TestInstallationScanner:
    """Test cases for InstallationScanner."""

    def test_empty_root(self, servers_root):
        """Test an empty root yields no installations."""
        assert InstallationScanner().scan(servers_root) == {}

    def test_missing_root_raises(self, temp_dir):
        """Test an unreadable root is a fatal error."""
        with pytest.raises(OSError):
            InstallationScanner().scan(temp_dir / "absent")

    def test_only_directories_with_properties(self, servers_root, make_installation):
        """Test files and directories without server.properties are skipped."""
        make_installation("alpha")
        (servers_root / "notes.txt").write_text("hello")
        (servers_root / "backups").mkdir()

        installations = InstallationScanner().scan(servers_root)

        assert list(installations) == [servers_root / "alpha"]

    def test_unsearchable_directory_skipped(self, servers_root, make_installation):
        """Test a directory the scanner may not search is skipped, not fatal."""
        make_installation("alpha")
        (servers_root / "lost+found").mkdir()
        real_stat = Path.stat

        def stat(self, *args, **kwargs):
            if self.parent.name == "lost+found":
                raise PermissionError(errno.EACCES, "Permission denied", str(self))
            return real_stat(self, *args, **kwargs)

        with patch.object(Path, "stat", stat):
            installations = InstallationScanner().scan(servers_root)

        assert list(installations) == [servers_root / "alpha"]

    def test_unsearchable_properties_file_reads_as_absent(self, temp_dir):
        """Test a permission error on the existence check means no file."""
        with patch.object(Path, "is_file", side_effect=PermissionError(errno.EACCES, "denied")):
            assert read_properties(temp_dir / "server.properties") is None

    def test_installation_without_world(self, servers_root, make_installation):
        """Test an installation with no world directory measures 0 bytes."""
        make_installation("alpha", {"server-port": "25566"})

        installation = InstallationScanner().scan(servers_root)[servers_root / "alpha"]

        assert installation.world_size_bytes == 0
        assert installation.server_port == 25566
        assert installation.name == "alpha"

    def test_world_size_uses_level_name(self, servers_root, make_installation):
        """Test the world directory is taken from level-name."""
        make_installation(
            "beta",
            {"level-name": "survival"},
            world_files={"level.dat": b"x" * 64, "region/r.0.0.mca": b"x" * 512},
            level_name="survival",
        )

        installation = InstallationScanner().scan(servers_root)[servers_root / "beta"]

        assert installation.level_name == "survival"
        assert installation.world_size_bytes == 576

    def test_scan_is_sorted_and_keyed_by_resolved_path(self, servers_root, make_installation):
        """Test keys are resolved paths in path order."""
        make_installation("zeta")
        make_installation("alpha")

        installations = InstallationScanner().scan(servers_root)

        assert list(installations) == [servers_root / "alpha", servers_root / "zeta"]
        assert all(path.is_absolute() for path in installations)

    def test_symlinked_installation_resolves_to_target(self, temp_dir, servers_root,
                                                       make_installation):
        """Test an installation reached through a symlink is keyed by its target."""
        target = make_installation("real")
        link_root = temp_dir / "links"
        link_root.mkdir()
        os.symlink(target, link_root / "alias")

        installations = InstallationScanner().scan(link_root)

        assert list(installations) == [target]

    def test_load_installation_without_properties(self, temp_dir):
        """Test a plain directory is not an installation."""
        assert InstallationScanner().load_installation(temp_dir) is None

    def test_resolve_directory_expands_user(self, monkeypatch, temp_dir):
        """Test '~' is expanded before resolution."""
        monkeypatch.setenv("HOME", str(temp_dir))

        assert resolve_directory("~") == temp_dir
