"""Catalog construction from devices and reconciled sections.

Each process slot of a section becomes one schedulable unit. Every unit
receives the driver control nodes plus the UIO nodes of all online
devices, section environment variables and NUMA topology.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from qat_plugin.domain.entities.device import Device, DeviceSpec
from qat_plugin.domain.entities.device_tree import DeviceInfo, DeviceState, DeviceTree
from qat_plugin.domain.entities.section import Section
from qat_plugin.domain.entities.topology import TopologyInfo
from qat_plugin.domain.services.topology_resolver import TopologyError, TopologyResolver
from qat_plugin.domain.value_objects.identifiers import (
    SECTION_ENV_PREFIX,
    create_unit_id,
    section_env_name,
)

logger = logging.getLogger(__name__)

GLOBAL_DEVICE_NODES = (
    "/dev/qat_adf_ctl",
    "/dev/qat_dev_processes",
    "/dev/usdm_drv",
)


class DeviceTreeError(Exception):
    """Device catalog could not be built."""
    pass


def uio_device_list_path(sysfs: Path, bus_address: str) -> Path:
    """Directory listing the UIO devices of a PCI function."""
    fields = bus_address.split(":")
    pci_root = f"pci{fields[0]}:{fields[1]}"
    return Path(sysfs) / "devices" / pci_root / bus_address / "uio"


class DeviceTreeBuilder:
    """Build the DeviceTree for one scan cycle.

    Args:
        root: Directory that stands for "/" when reading sysfs.
        resolver: Topology resolver; built over `root` if omitted.
    """

    def __init__(self, root: str | Path = "/", resolver: Optional[TopologyResolver] = None) -> None:
        self._sysfs = Path(root) / "sys"
        self._resolver = resolver or TopologyResolver(root)
        self.topology_failures = 0

    def get_uio_devices(self, device: Device) -> list[str]:
        """Names of the UIO device nodes of a device.

        Raises:
            DeviceTreeError: If the sysfs directory can't be read.
        """
        sysfs_dir = uio_device_list_path(self._sysfs, device.bus_address)
        logger.debug("Path to uio devices: %s", sysfs_dir)

        try:
            names = sorted(os.listdir(sysfs_dir))
        except OSError as e:
            raise DeviceTreeError(f"Can't read {sysfs_dir}") from e

        if not names:
            logger.warning("no uio devices listed in %s", sysfs_dir)
        return names

    def build(self, devices: list[Device], sections: Mapping[str, Section]) -> DeviceTree:
        """Create catalog units for every section process slot.

        Args:
            devices: Online devices.
            sections: Reconciled sections by name.

        Raises:
            DeviceTreeError: If a device's UIO directory can't be read.
        """
        tree = DeviceTree()
        self.topology_failures = 0

        nodes = [DeviceSpec.for_path(path) for path in GLOBAL_DEVICE_NODES]
        for device in devices:
            for uio in self.get_uio_devices(device):
                nodes.append(DeviceSpec.for_path(f"/dev/{uio}"))

        topology = self._resolve_topology([node.host_path for node in nodes])

        uniq_id = 0
        for name, section in sections.items():
            dev_type = section.device_type

            for endpoint in section.schedulable_endpoints:
                for _ in range(endpoint.process_count):
                    envs = {
                        section_env_name(dev_type, uniq_id): name,
                        # Overridden when a container gets several units;
                        # multi-process workloads read the numbered variables
                        SECTION_ENV_PREFIX: name,
                    }
                    info = DeviceInfo(
                        state=DeviceState.HEALTHY,
                        nodes=list(nodes),
                        envs=envs,
                        topology=TopologyInfo(nodes=list(topology.nodes)) if topology else None,
                    )
                    uniq_id += 1
                    tree.add_device(dev_type, create_unit_id(name, uniq_id), info)

        return tree

    def _resolve_topology(self, dev_paths: list[str]) -> Optional[TopologyInfo]:
        try:
            return self._resolver.get_topology_info(dev_paths)
        except (TopologyError, OSError) as e:
            self.topology_failures += 1
            logger.warning("GetTopologyInfo: %s", e)
            return None
