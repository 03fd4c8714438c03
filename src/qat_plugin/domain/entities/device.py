"""Device entities representing QAT accelerator instances.

A Device is one physical (or SR-IOV virtual) function reported "up" by
the kernel driver during a scan cycle.
"""

from __future__ import annotations

from dataclasses import dataclass

from qat_plugin.domain.value_objects.identifiers import BusAddress, DeviceId

VF_SUFFIX = "vf"


@dataclass(frozen=True)
class Device:
    """Online accelerator instance."""
    id: DeviceId                  # e.g., "dev0"
    device_type: str              # e.g., "c4xxx", "c6xxvf"
    bus_address: BusAddress       # e.g., "3d:00.0"

    @property
    def is_virtual_function(self) -> bool:
        """Check if this instance is an SR-IOV virtual function."""
        return self.device_type.endswith(VF_SUFFIX)

    @property
    def config_name(self) -> str:
        """Name of the driver configuration file for this instance."""
        return f"{self.device_type}_{self.id}.conf"


@dataclass(frozen=True)
class DeviceSpec:
    """Device node to expose inside a container."""
    host_path: str
    container_path: str
    permissions: str = "rw"

    @classmethod
    def for_path(cls, dev_path: str) -> DeviceSpec:
        """Expose a host device node at the same path in the container."""
        return cls(host_path=dev_path, container_path=dev_path)


@dataclass(frozen=True)
class Mount:
    """Host path mounted into a container."""
    host_path: str
    container_path: str
    read_only: bool = False
