"""Inbound ports - interfaces offered by the QAT plugin."""

from qat_plugin.ports.inbound.api import PostAllocator, Scanner

__all__ = [
    "PostAllocator",
    "Scanner",
]
