"""Topology entities describing device affinity to CPUs and memory.

Hints are read from sysfs for a device and its dependencies; the
TopologyInfo is the orchestrator-facing summary (NUMA node ids).
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class TopologyHint:
    """Affinity hint read from one sysfs directory."""
    provider: str                 # sysfs path the hint was read from
    cpus: str = ""                # e.g., "0-15,32-47"
    numas: str = ""               # e.g., "0"
    sockets: str = ""             # e.g., "1"

    @property
    def is_empty(self) -> bool:
        """Check if no affinity information is known."""
        return not (self.cpus or self.numas or self.sockets)

    def __str__(self) -> str:
        parts = []
        if self.cpus:
            parts.append("CPUs:" + self.cpus)
        if self.numas:
            parts.append("NUMAs:" + self.numas)
        if self.sockets:
            parts.append("sockets:" + self.sockets)
        return f"<hints {', '.join(parts)} (from {self.provider})>"


# Provider path -> hint
Hints = dict[str, TopologyHint]


@dataclass
class TopologyInfo:
    """NUMA nodes a set of device nodes is attached to."""
    nodes: list[int] = field(default_factory=list)
