"""Device enumeration from the QAT driver status output.

Parses `adf_ctl status` to find accelerator instances that are currently
up, taking SR-IOV and IOMMU state into account:

- If any virtual function is listed, only virtual functions are used.
- With IOMMU enabled, physical functions cannot be used at all.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterable, Optional, Sequence

from qat_plugin.domain.entities.device import VF_SUFFIX, Device
from qat_plugin.domain.value_objects.identifiers import BusAddress, create_device_id
from qat_plugin.ports.outbound import CommandError, CommandRunnerPort

logger = logging.getLogger(__name__)

STATUS_COMMAND = ("adf_ctl", "status")

# e.g. " qat_dev0 - type: c6xx,  inst_id: 0,  node_id: 0,  bsf: 0000:3d:00.0,  #accel: 5 #engines: 10 state: up"
ADF_CTL_PATTERN = re.compile(
    r"type: (?P<devtype>[A-Za-z0-9]+), .* inst_id: (?P<instid>[0-9]+), "
    r".* bsf: (?P<domain>[0-9a-f]{4}:)?(?P<bsf>[0-9a-f]{2}:[0-9a-f]{2}\.[0-9a-f]), "
    r".* state: (?P<state>[A-Za-z]+)$"
)


class EnumerationError(Exception):
    """Device enumeration failed."""
    pass


def parse_online_devices(
    output: str,
    iommu_on: bool,
    deny_list: Iterable[str] = (),
) -> list[Device]:
    """Extract online devices from driver status output.

    Args:
        output: Combined output of the driver status command.
        iommu_on: Whether IOMMU is enabled system-wide.
        deny_list: Device types that must never be exposed.

    Returns:
        Devices in the order they are listed.
    """
    denied = set(deny_list)
    matches = [m for m in map(ADF_CTL_PATTERN.search, output.splitlines()) if m]

    vf_on = any(m.group("devtype").endswith(VF_SUFFIX) for m in matches)

    devices = []
    for m in matches:
        devtype = m.group("devtype")

        if m.group("state") != "up":
            continue

        if devtype in denied:
            logger.warning("skip denylisted device %s", devtype)
            continue

        is_vf = devtype.endswith(VF_SUFFIX)
        # Cannot use PF with IOMMU enabled
        if iommu_on and not is_vf:
            continue
        if vf_on and not is_vf:
            continue

        device = Device(
            id=create_device_id(m.group("instid")),
            device_type=devtype,
            bus_address=BusAddress((m.group("domain") or "") + m.group("bsf")),
        )
        devices.append(device)
        logger.debug("New online device %s", device)

    return devices


def get_iommu_status(root: Path = Path("/")) -> bool:
    """Check whether any IOMMU is registered with the kernel.

    Raises:
        EnumerationError: If the IOMMU class directory can't be read.
    """
    iommu_dir = Path(root) / "sys" / "class" / "iommu"
    try:
        return len(os.listdir(iommu_dir)) > 0
    except OSError as e:
        raise EnumerationError(f"Unable to read IOMMU status from {iommu_dir}") from e


class DeviceEnumerator:
    """Enumerate online QAT devices by running the driver status tool."""

    def __init__(
        self,
        runner: CommandRunnerPort,
        command: Sequence[str] = STATUS_COMMAND,
        deny_list: Iterable[str] = (),
    ) -> None:
        self._runner = runner
        self._command = tuple(command)
        self._deny_list = frozenset(deny_list)

    def get_online_devices(self, iommu_on: bool, output: Optional[str] = None) -> list[Device]:
        """Return devices currently reported up by the driver.

        Args:
            iommu_on: Whether IOMMU is enabled system-wide.
            output: Pre-captured status output; the command is run if None.

        Raises:
            EnumerationError: If the driver status can't be obtained.
        """
        if output is None:
            try:
                output = self._runner.combined_output(self._command)
            except CommandError as e:
                raise EnumerationError("Can't get driver status") from e

        return parse_online_devices(output, iommu_on, self._deny_list)
