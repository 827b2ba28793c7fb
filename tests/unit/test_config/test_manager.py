"""
Unit tests for configuration loading and caching.
"""

import pytest

from mcmonitor.config import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)
from mcmonitor.validation import ValidationError


@pytest.mark.unit
class TestConfigManager:
    """Test cases for the cached configuration interface."""

    def test_load_from_custom_path(self, config_file):
        """Test a configuration file is loaded and validated."""
        set_config_path(config_file)

        config = get_config()

        assert config.probe.max_workers == 4
        assert config.exporter.port == 9200
        assert is_config_loaded()

    def test_config_is_cached(self, config_file):
        """Test repeated access returns the same object until cleared."""
        set_config_path(config_file)

        first = get_config()
        assert get_config() is first

        clear_config_cache()
        assert not is_config_loaded()
        assert get_config() is not first

    def test_missing_file(self, temp_dir):
        """Test a missing file raises FileNotFoundError."""
        set_config_path(temp_dir / "absent.toml")

        with pytest.raises(FileNotFoundError):
            get_config()

    def test_malformed_toml(self, temp_dir):
        """Test a malformed file raises a ValueError subclass."""
        path = temp_dir / "broken.toml"
        path.write_text("[exporter\nport = ")
        set_config_path(path)

        with pytest.raises(ValueError):
            get_config()

    def test_invalid_value(self, temp_dir, sample_config_data):
        """Test an invalid value surfaces as ValidationError."""
        import toml

        sample_config_data["exporter"]["port"] = 70000
        path = temp_dir / "config.toml"
        with open(path, "w") as f:
            toml.dump(sample_config_data, f)
        set_config_path(path)

        with pytest.raises(ValidationError):
            get_config()

    def test_config_info(self, config_file):
        """Test the config info reflects path and load state."""
        set_config_path(config_file)

        info = get_config_info()

        assert info["config_path"] == str(config_file)
        assert info["config_exists"] is True
        assert info["is_loaded"] is False

    def test_default_config_file_loads(self):
        """Test the shipped conf/config.toml is valid."""
        config = get_config()

        assert config.introspection.backend == "jolokia"
        assert config.exporter.host == "::1"
