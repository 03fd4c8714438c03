"""Domain services for the QAT plugin.

Services implement the scan pipeline:
- DeviceEnumerator: online devices from `adf_ctl status`
- ConfigReconciler: workload sections from per-device configuration
- TopologyResolver: NUMA/CPU/socket affinity from sysfs
- DeviceTreeBuilder: catalog of schedulable units
"""

from qat_plugin.domain.services.config_reconciler import (
    ConfigError,
    ConfigReconciler,
    DriverConfig,
)
from qat_plugin.domain.services.device_enumerator import (
    DeviceEnumerator,
    EnumerationError,
    get_iommu_status,
    parse_online_devices,
)
from qat_plugin.domain.services.device_tree_builder import (
    DeviceTreeBuilder,
    DeviceTreeError,
)
from qat_plugin.domain.services.topology_resolver import (
    TopologyError,
    TopologyResolver,
    merge_topology_hints,
)

__all__ = [
    "ConfigError",
    "ConfigReconciler",
    "DriverConfig",
    "DeviceEnumerator",
    "EnumerationError",
    "get_iommu_status",
    "parse_online_devices",
    "DeviceTreeBuilder",
    "DeviceTreeError",
    "TopologyError",
    "TopologyResolver",
    "merge_topology_hints",
]
