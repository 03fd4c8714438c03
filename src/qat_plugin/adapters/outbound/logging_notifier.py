"""Notifier that logs and meters each published catalog.

Used when the plugin runs standalone, without a device plugin server to
consume catalogs.
"""

from __future__ import annotations

from typing import Optional

from qat_plugin.domain.entities.device_tree import DeviceTree
from qat_plugin.infrastructure.logging import get_logger
from qat_plugin.infrastructure.metrics import MetricsRegistry


class LoggingNotifier:
    """Catalog sink that records the latest tree."""

    def __init__(self, metrics: Optional[MetricsRegistry] = None) -> None:
        self._logger = get_logger(__name__)
        self._metrics = metrics
        self.last_tree: Optional[DeviceTree] = None
        self.notifications = 0

    def notify(self, tree: DeviceTree) -> None:
        self.last_tree = tree
        self.notifications += 1

        counts = {dev_type: len(units) for dev_type, units in tree}
        self._logger.info("device_tree_published", units=len(tree), device_types=counts)

        if self._metrics:
            self._metrics.catalog_units.clear()
            for dev_type, count in counts.items():
                self._metrics.catalog_units.labels(device_type=dev_type).set(count)
