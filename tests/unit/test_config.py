"""Unit tests for QAT plugin configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from qat_plugin.infrastructure.config import (
    Config,
    ObservabilityConfig,
    PluginConfig,
    get_config,
)


@pytest.mark.unit
class TestPluginConfig:
    """Tests for PluginConfig."""

    def test_default_values(self):
        """Test default scan configuration."""
        config = PluginConfig()
        assert config.config_dir == Path("/etc")
        assert config.root == Path("/")
        assert config.scan_interval_seconds == 5.0
        assert config.status_command == ["adf_ctl", "status"]
        assert config.deny_list == []
        assert config.one_shot is False

    def test_interval_must_be_positive(self):
        """A zero delay would spin the scan loop."""
        with pytest.raises(ValidationError):
            PluginConfig(scan_interval_seconds=0)

    def test_status_command_not_empty(self):
        with pytest.raises(ValidationError):
            PluginConfig(status_command=[])


@pytest.mark.unit
class TestObservabilityConfig:
    """Tests for ObservabilityConfig."""

    def test_default_values(self):
        """Test default observability configuration."""
        config = ObservabilityConfig()
        assert config.log_level == "INFO"
        assert config.log_format == "json"
        assert config.metrics_enabled is False
        assert config.metrics_port == 8010
        assert config.otel_endpoint is None
        assert config.otel_service_name == "qat_device_plugin"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            ObservabilityConfig(log_level="TRACE")


@pytest.mark.unit
class TestConfig:
    """Tests for main Config class."""

    def test_default_config(self):
        """Test default configuration."""
        config = Config()
        assert isinstance(config.plugin, PluginConfig)
        assert isinstance(config.observability, ObservabilityConfig)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        """Nested settings are read from prefixed environment variables."""
        monkeypatch.setenv("QAT_PLUGIN_PLUGIN__SCAN_INTERVAL_SECONDS", "1.5")
        monkeypatch.setenv("QAT_PLUGIN_PLUGIN__CONFIG_DIR", "/opt/qat/etc")
        monkeypatch.setenv("QAT_PLUGIN_OBSERVABILITY__LOG_FORMAT", "console")

        config = Config()
        assert config.plugin.scan_interval_seconds == 1.5
        assert config.plugin.config_dir == Path("/opt/qat/etc")
        assert config.observability.log_format == "console"

    def test_get_config_cached(self):
        assert get_config() is get_config()
