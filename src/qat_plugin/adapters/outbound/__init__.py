"""Outbound adapters - Implementations of outbound ports."""

from qat_plugin.adapters.outbound.logging_notifier import LoggingNotifier
from qat_plugin.adapters.outbound.subprocess_runner import SubprocessRunner

__all__ = [
    "LoggingNotifier",
    "SubprocessRunner",
]
