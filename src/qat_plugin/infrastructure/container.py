"""Dependency injection container for the QAT plugin."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

import structlog
from opentelemetry import trace

from qat_plugin.adapters.outbound.subprocess_runner import SubprocessRunner
from qat_plugin.application.plugin import QATDevicePlugin
from qat_plugin.infrastructure.config import Config, get_config
from qat_plugin.infrastructure.logging import setup_logging
from qat_plugin.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from qat_plugin.infrastructure.tracing import setup_tracing


@dataclass
class Container:
    """Dependency injection container for QAT plugin components."""

    config: Config
    logger: structlog.stdlib.BoundLogger
    tracer: trace.Tracer
    metrics: MetricsRegistry
    plugin: QATDevicePlugin

    _instance: ClassVar[Optional[Container]] = None

    @classmethod
    def create(cls, config: Optional[Config] = None) -> Container:
        """Create and initialize the container with all dependencies."""
        if cls._instance is not None:
            return cls._instance

        config = config or get_config()
        obs = config.observability

        logger = setup_logging(obs.log_level, obs.log_format)
        tracer = setup_tracing(
            service_name=obs.otel_service_name,
            otlp_endpoint=obs.otel_endpoint,
            environment=obs.environment,
        )
        metrics = setup_metrics(obs.metrics_port) if obs.metrics_enabled else get_metrics()

        plugin = QATDevicePlugin(
            runner=SubprocessRunner(),
            config_dir=config.plugin.config_dir,
            root=config.plugin.root,
            interval=config.plugin.scan_interval_seconds,
            status_command=config.plugin.status_command,
            deny_list=config.plugin.deny_list,
            metrics=metrics,
        )

        cls._instance = cls(
            config=config,
            logger=logger,
            tracer=tracer,
            metrics=metrics,
            plugin=plugin,
        )

        logger.info(
            "qat_plugin_container_initialized",
            environment=obs.environment,
            config_dir=str(config.plugin.config_dir),
        )

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the container (useful for testing)."""
        cls._instance = None
