"""Topology resolution from sysfs.

Finds CPU, NUMA and socket affinity for a device node by walking its sysfs
directory upwards and following dependent devices (VFIO group members,
slaves of composed block devices).

Kernel quirks handled here:
    - numa_node of -1 means "not NUMA aware", not node 0.
    - Some firmware reports the socket id as numa_node with no
      local_cpulist; such values are reinterpreted as socket hints unless
      the parent device provides CPUs.

References:
    - Documentation/ABI/testing/sysfs-bus-pci (local_cpulist, numa_node)
    - Documentation/driver-api/vfio.rst (IOMMU groups)
"""

from __future__ import annotations

import glob
import logging
import os
import stat
from pathlib import Path
from typing import Iterable, Optional

from qat_plugin.domain.entities.topology import Hints, TopologyHint, TopologyInfo

logger = logging.getLogger(__name__)

ATTR_CPULIST = "local_cpulist"
ATTR_NUMA_NODE = "numa_node"


class TopologyError(Exception):
    """Topology lookup for a device failed."""
    pass


def merge_topology_hints(org: Optional[Hints], hints: Hints) -> Hints:
    """Combine two hint sets; entries already in `org` win."""
    res: Hints = dict(org) if org else {}
    for provider, hint in hints.items():
        res.setdefault(provider, hint)
    return res


def _join_unique(values: Iterable[str]) -> str:
    return ",".join(dict.fromkeys(v for v in values if v))


class TopologyResolver:
    """Resolve topology hints below a (possibly fake) filesystem root.

    Args:
        root: Directory that stands for "/" in all sysfs lookups.
    """

    def __init__(self, root: str | Path = "/") -> None:
        self._root = os.path.realpath(root)
        self._sys_devices = os.path.join(self._root, "sys", "devices")
        self._sys_virtual = os.path.join(self._sys_devices, "virtual")
        self._iommu_groups = os.path.join(self._root, "sys", "kernel", "iommu_groups")

    @property
    def root(self) -> str:
        return self._root

    def new_topology_hints(self, dev_path: str | Path) -> Hints:
        """Return hints for a sysfs device and its dependent devices.

        Args:
            dev_path: sysfs path of the device (symlinks allowed).

        Raises:
            TopologyError: If the path can't be resolved or read.
        """
        try:
            real_path = os.path.realpath(dev_path, strict=True)
        except OSError as e:
            raise TopologyError(f"failed get realpath for {dev_path}") from e

        hints: Hints = {}
        prefix = self._sys_devices + os.sep
        path = real_path
        while path.startswith(prefix):
            hint = self.read_hint(path)
            if not hint.is_empty:
                hints[hint.provider] = hint
                break
            path = os.path.dirname(path)

        deps = sorted(glob.glob(os.path.join(glob.escape(real_path), "slaves", "*")))
        deps.extend(self._devices_from_virtual(real_path))

        for dep in deps:
            hints = merge_topology_hints(hints, self.new_topology_hints(dep))

        return hints

    def read_hint(self, sysfs_path: str) -> TopologyHint:
        """Read the hint provided by a single sysfs directory."""
        hint = TopologyHint(
            provider=sysfs_path,
            cpus=self._read_attr(sysfs_path, ATTR_CPULIST),
            numas=self._read_attr(sysfs_path, ATTR_NUMA_NODE),
        )

        if hint.numas == "-1":
            # non-NUMA aware device or system
            hint.numas = ""

        if hint.numas and not hint.cpus:
            # BIOS reports socket id as NUMA node; ask the parent device or bus
            try:
                parent_hints = self.new_topology_hints(os.path.dirname(sysfs_path))
            except TopologyError as e:
                logger.debug("No parent hints for %s: %s", sysfs_path, e)
                parent_hints = {}

            cpus = _join_unique(h.cpus for h in parent_hints.values())
            numas = _join_unique(h.numas for h in parent_hints.values())
            if cpus:
                hint.cpus = cpus
            if numas:
                hint.numas = numas

            if not hint.cpus and hint.numas:
                hint.sockets = hint.numas
                hint.numas = ""

        return hint

    def find_sysfs_device(self, dev: str) -> Optional[str]:
        """Map a device node or file to its sysfs device directory.

        For device nodes the device itself is returned; for regular files and
        directories, the storage device holding the inode.

        Returns:
            Canonical sysfs path, or None if `dev` does not exist.

        Raises:
            TopologyError: For virtual device nodes or unresolvable links.
        """
        node = os.path.join(self._root, dev.lstrip("/"))
        try:
            st = os.stat(node)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise TopologyError(f"unable to get stat for {dev}") from e

        dev_type = "block"
        rdev = st.st_dev
        if stat.S_ISCHR(st.st_mode) or stat.S_ISBLK(st.st_mode):
            rdev = st.st_rdev
            if stat.S_ISCHR(st.st_mode):
                dev_type = "char"

        major, minor = os.major(rdev), os.minor(rdev)
        if major == 0:
            raise TopologyError(f"{dev} is a virtual device node")

        link = os.path.join(self._root, "sys", "dev", dev_type, f"{major}:{minor}")
        try:
            return os.path.realpath(link, strict=True)
        except OSError as e:
            raise TopologyError(f"failed get realpath for {link}") from e

    def get_topology_info(self, devs: Iterable[str]) -> TopologyInfo:
        """Collect the NUMA nodes of a list of device nodes.

        Raises:
            TopologyError: If a device is missing or reports an invalid node.
        """
        node_ids: set[int] = set()

        for dev in devs:
            sysfs_device = self.find_sysfs_device(dev)
            if sysfs_device is None:
                raise TopologyError(f"device {dev} doesn't exist")

            for hint in self.new_topology_hints(sysfs_device).values():
                if not hint.numas:
                    continue
                for node in hint.numas.split(","):
                    try:
                        node_id = int(node.strip())
                    except ValueError as e:
                        raise TopologyError(f"unable to convert numa node {node} into int") from e
                    if node_id < 0:
                        raise TopologyError(f"numa node is negative: {node_id}")
                    node_ids.add(node_id)

        return TopologyInfo(nodes=sorted(node_ids))

    def _devices_from_virtual(self, real_dev_path: str) -> list[str]:
        """Expand a VFIO group device into its member devices.

        An unreadable group contributes no members.
        """
        rel_path = os.path.relpath(real_dev_path, self._sys_virtual)
        if rel_path.startswith(".."):
            return []

        subsystem, _, group = rel_path.rpartition(os.sep)
        if subsystem != "vfio":
            return []

        group_dir = os.path.join(self._iommu_groups, group, "devices")
        try:
            members = sorted(os.listdir(group_dir))
        except OSError as e:
            logger.debug("failed to read IOMMU group %s: %s", group_dir, e)
            return []

        devs = []
        for member in members:
            try:
                devs.append(os.path.realpath(os.path.join(group_dir, member), strict=True))
            except OSError as e:
                logger.debug("failed to get real path for %s: %s", member, e)
                return []
        return devs

    @staticmethod
    def _read_attr(directory: str, name: str) -> str:
        try:
            with open(os.path.join(directory, name), encoding="utf-8") as f:
                return f.read().strip()
        except FileNotFoundError:
            return ""
        except OSError as e:
            raise TopologyError(f"{directory}: unable to read file {name!r}") from e
