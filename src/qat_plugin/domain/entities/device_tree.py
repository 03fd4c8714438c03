"""Device catalog entities handed to the orchestrator.

The DeviceTree maps resource type -> unit id -> DeviceInfo and is rebuilt
from scratch on every scan cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from qat_plugin.domain.entities.device import DeviceSpec, Mount
from qat_plugin.domain.entities.topology import TopologyInfo


class DeviceState(Enum):
    """Unit health as reported to the orchestrator."""
    HEALTHY = "Healthy"


@dataclass
class DeviceInfo:
    """One schedulable unit."""
    state: DeviceState
    nodes: list[DeviceSpec]
    mounts: list[Mount] = field(default_factory=list)
    envs: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    topology: Optional[TopologyInfo] = None

    @property
    def host_paths(self) -> list[str]:
        """Host paths of all device nodes."""
        return [node.host_path for node in self.nodes]


class DeviceTree:
    """Two-level catalog: device type -> unit id -> DeviceInfo."""

    def __init__(self) -> None:
        self._tree: dict[str, dict[str, DeviceInfo]] = {}

    def add_device(self, dev_type: str, unit_id: str, info: DeviceInfo) -> None:
        """Add a unit under the given device type."""
        self._tree.setdefault(dev_type, {})[unit_id] = info

    def device_type_count(self, dev_type: str) -> int:
        """Number of units of the given type."""
        return len(self._tree.get(dev_type, {}))

    def device_types(self) -> list[str]:
        """All device types in the catalog."""
        return list(self._tree)

    def units(self, dev_type: str) -> dict[str, DeviceInfo]:
        """Units of the given type (empty if unknown)."""
        return dict(self._tree.get(dev_type, {}))

    def __iter__(self) -> Iterator[tuple[str, dict[str, DeviceInfo]]]:
        return iter(self._tree.items())

    def __len__(self) -> int:
        return sum(len(units) for units in self._tree.values())

    def __contains__(self, dev_type: object) -> bool:
        return dev_type in self._tree
