"""Domain entities for the QAT plugin.

Entities represent the cycle-scoped objects of a scan:
- Device: Online accelerator instance
- Section: Workload pool from the driver configuration
- DeviceTree: Catalog of schedulable units
- TopologyHint: CPU/NUMA/socket affinity of a device
"""

from qat_plugin.domain.entities.allocation import (
    AllocateResponse,
    ContainerAllocateResponse,
)
from qat_plugin.domain.entities.device import (
    VF_SUFFIX,
    Device,
    DeviceSpec,
    Mount,
)
from qat_plugin.domain.entities.device_tree import (
    DeviceInfo,
    DeviceState,
    DeviceTree,
)
from qat_plugin.domain.entities.section import (
    Endpoint,
    Section,
)
from qat_plugin.domain.entities.topology import (
    Hints,
    TopologyHint,
    TopologyInfo,
)

__all__ = [
    # Device
    "VF_SUFFIX",
    "Device",
    "DeviceSpec",
    "Mount",
    # Section
    "Endpoint",
    "Section",
    # Catalog
    "DeviceInfo",
    "DeviceState",
    "DeviceTree",
    # Topology
    "Hints",
    "TopologyHint",
    "TopologyInfo",
    # Allocation
    "AllocateResponse",
    "ContainerAllocateResponse",
]
