"""Configuration management for the QAT plugin."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PluginConfig(BaseModel):
    """Scan loop configuration."""

    config_dir: Path = Field(default=Path("/etc"), description="Directory of <type>_<id>.conf files")
    root: Path = Field(default=Path("/"), description="Filesystem root for sysfs lookups")
    scan_interval_seconds: float = Field(default=5.0, gt=0, description="Delay between scan cycles")
    status_command: list[str] = Field(
        default_factory=lambda: ["adf_ctl", "status"], min_length=1, description="Driver status command"
    )
    deny_list: list[str] = Field(default_factory=list, description="Device types never exposed")
    one_shot: bool = Field(default=False, description="Run a single scan cycle and exit")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    metrics_enabled: bool = Field(default=False)
    metrics_port: int = Field(default=8010, ge=1, le=65535, description="Prometheus metrics port")
    otel_endpoint: str | None = Field(default=None)
    otel_service_name: str = Field(default="qat_device_plugin")
    environment: str = Field(default="development")


class Config(BaseSettings):
    """Main configuration for the QAT plugin."""

    model_config = SettingsConfigDict(
        env_prefix="QAT_PLUGIN_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    plugin: PluginConfig = Field(default_factory=PluginConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
