"""QAT Device Plugin Application.

Runs the scan pipeline (enumerate -> reconcile -> build catalog ->
publish -> sleep) and post-processes allocate responses. Pipeline errors
end the loop and are left to the process supervisor; nothing is retried
within a cycle.
"""

from __future__ import annotations

import time
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from qat_plugin.domain.entities.allocation import AllocateResponse
from qat_plugin.domain.entities.device_tree import DeviceTree
from qat_plugin.domain.services.config_reconciler import ConfigReconciler
from qat_plugin.domain.services.device_enumerator import (
    STATUS_COMMAND,
    DeviceEnumerator,
    get_iommu_status,
)
from qat_plugin.domain.services.device_tree_builder import DeviceTreeBuilder
from qat_plugin.domain.services.topology_resolver import TopologyResolver
from qat_plugin.domain.value_objects.identifiers import SECTION_ENV_PREFIX
from qat_plugin.infrastructure.logging import get_logger
from qat_plugin.infrastructure.metrics import MetricsRegistry
from qat_plugin.infrastructure.tracing import trace_span
from qat_plugin.ports.outbound import CommandRunnerPort, NotifierPort

DEFAULT_SCAN_INTERVAL = 5.0

# QAT_SECTION_NAME_cy<N>_dc<M>_<n>
SECTION_ENV_FIELDS = 6


class ScanState(Enum):
    """Scan loop state."""
    IDLE = "idle"
    ENUMERATING = "enumerating"
    RECONCILING = "reconciling"
    BUILDING_CATALOG = "building_catalog"
    PUBLISHING = "publishing"
    SLEEPING = "sleeping"


class AllocationError(Exception):
    """Allocate response has an unexpected shape."""
    pass


def renumber_section_envs(envs: dict[str, str]) -> None:
    """Compact numbered section variables to a 0..k-1 range in place.

    Raises:
        AllocationError: If a section variable doesn't have six fields.
    """
    to_delete = []
    to_add = {}
    counter = 0

    for key, value in envs.items():
        if not key.startswith(SECTION_ENV_PREFIX + "_"):
            continue

        parts = key.split("_")
        if len(parts) != SECTION_ENV_FIELDS:
            raise AllocationError(f"Wrong format of env variable name {key}")

        prefix = "_".join(parts[:SECTION_ENV_FIELDS - 1])
        to_delete.append(key)
        to_add[f"{prefix}_{counter}"] = value
        counter += 1

    for key in to_delete:
        del envs[key]
    envs.update(to_add)


class QATDevicePlugin:
    """Kernel driver based QAT device plugin.

    Implements the Scanner and PostAllocator ports.
    """

    def __init__(
        self,
        runner: CommandRunnerPort,
        config_dir: str | Path = "/etc",
        root: str | Path = "/",
        interval: float = DEFAULT_SCAN_INTERVAL,
        status_command: Sequence[str] = STATUS_COMMAND,
        deny_list: Iterable[str] = (),
        resolver: Optional[TopologyResolver] = None,
        metrics: Optional[MetricsRegistry] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the plugin.

        Args:
            runner: Runs the driver status command.
            config_dir: Directory with per-device driver configuration.
            root: Filesystem root for sysfs lookups.
            interval: Delay between scan cycles in seconds.
            status_command: Driver status command line.
            deny_list: Device types never exposed.
            resolver: Topology resolver (built over `root` if None).
            metrics: Metrics registry; metrics are skipped if None.
            sleep: Sleep function, replaceable in tests.
        """
        self._root = Path(root)
        self._enumerator = DeviceEnumerator(runner, status_command, deny_list)
        self._reconciler = ConfigReconciler(Path(config_dir))
        self._builder = DeviceTreeBuilder(root, resolver or TopologyResolver(root))
        self._interval = interval
        self._metrics = metrics
        self._sleep = sleep
        self._logger = get_logger(__name__)
        self.state = ScanState.IDLE

    def scan_once(self) -> DeviceTree:
        """Run one enumerate/reconcile/build pass.

        Raises:
            EnumerationError, ConfigError, DeviceTreeError: On pipeline failure.
        """
        self.state = ScanState.ENUMERATING
        with trace_span("enumerate") as span:
            iommu_on = get_iommu_status(self._root)
            devices = self._enumerator.get_online_devices(iommu_on)
            span.set_attribute("qat.iommu_on", iommu_on)
            span.set_attribute("qat.devices", len(devices))

        self.state = ScanState.RECONCILING
        with trace_span("reconcile", devices=len(devices)):
            sections = self._reconciler.parse_configs(devices)

        self.state = ScanState.BUILDING_CATALOG
        with trace_span("build_catalog", sections=len(sections)):
            tree = self._builder.build(devices, sections)

        self._logger.debug(
            "scan_cycle_completed",
            iommu_on=iommu_on,
            devices=[d.id for d in devices],
            sections=list(sections),
            units=len(tree),
        )

        if self._metrics:
            self._metrics.devices_online.set(len(devices))
            if self._builder.topology_failures:
                self._metrics.topology_failures_total.inc(self._builder.topology_failures)

        return tree

    def scan(self, notifier: NotifierPort, max_cycles: Optional[int] = None) -> None:
        """Scan forever (or `max_cycles` times), publishing every catalog."""
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            start = time.monotonic()
            try:
                tree = self.scan_once()
            except Exception:
                self.state = ScanState.IDLE
                if self._metrics:
                    self._metrics.scan_cycles_total.labels(status="error").inc()
                raise

            if self._metrics:
                self._metrics.scan_cycles_total.labels(status="success").inc()
                self._metrics.scan_duration_seconds.observe(time.monotonic() - start)

            self.state = ScanState.PUBLISHING
            try:
                notifier.notify(tree)
            except Exception:
                self._logger.exception("notify_failed")

            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break

            self.state = ScanState.SLEEPING
            self._sleep(self._interval)
            self.state = ScanState.IDLE

        self.state = ScanState.IDLE

    def post_allocate(self, response: AllocateResponse) -> None:
        """Renumber section variables of every container response.

        Raises:
            AllocationError: On a malformed section variable name.
        """
        for container_response in response.container_responses:
            renumber_section_envs(container_response.envs)
