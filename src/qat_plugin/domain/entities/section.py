"""Workload section entities built from the driver configuration.

A Section is a named pool of user-space processes defined in the per-device
configuration files and aggregated across all devices that define it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from qat_plugin.domain.value_objects.identifiers import (
    DeviceId,
    DeviceType,
    SectionName,
    section_device_type,
)


@dataclass(frozen=True)
class Endpoint:
    """One device's contribution to a section."""
    device_id: DeviceId
    process_count: int


@dataclass
class Section:
    """Workload pool aggregated across devices."""
    name: SectionName
    crypto_engines: int
    compression_engines: int
    pinned: bool = False          # LimitDevAccess: one endpoint per device
    endpoints: list[Endpoint] = field(default_factory=list)

    @property
    def device_type(self) -> DeviceType:
        """Resource type label derived from the engine counts."""
        return section_device_type(self.crypto_engines, self.compression_engines)

    @property
    def schedulable_endpoints(self) -> list[Endpoint]:
        """Endpoints that produce catalog units.

        Unpinned endpoints are interchangeable, so only the first one is used.
        """
        if self.pinned:
            return list(self.endpoints)
        return self.endpoints[:1]

    @property
    def unit_count(self) -> int:
        """Number of catalog units this section produces."""
        return sum(ep.process_count for ep in self.schedulable_endpoints)
