"""Application layer for the QAT plugin.

Orchestrates domain services into the scan loop.
"""

from qat_plugin.application.plugin import (
    AllocationError,
    QATDevicePlugin,
    ScanState,
    renumber_section_envs,
)

__all__ = [
    "AllocationError",
    "QATDevicePlugin",
    "ScanState",
    "renumber_section_envs",
]
