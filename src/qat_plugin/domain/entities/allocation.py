"""Allocation response entities.

Mirror the shape of the orchestrator's allocate response so that it can be
post-processed before it is returned to the kubelet.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from qat_plugin.domain.entities.device import DeviceSpec, Mount


@dataclass
class ContainerAllocateResponse:
    """Allocation result for a single container."""
    envs: dict[str, str] = field(default_factory=dict)
    mounts: list[Mount] = field(default_factory=list)
    devices: list[DeviceSpec] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class AllocateResponse:
    """Allocation result for a pod."""
    container_responses: list[ContainerAllocateResponse] = field(default_factory=list)
