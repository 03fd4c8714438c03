"""Outbound ports - External dependency interfaces for the QAT plugin.

Outbound ports define what the scan pipeline needs from its environment:
a way to run driver tools and a sink for freshly built catalogs.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from qat_plugin.domain.entities.device_tree import DeviceTree


class CommandRunnerPort(Protocol):
    """Protocol for running a host command.

    References:
        - adf_ctl(8), the QAT driver control utility
    """

    def combined_output(self, args: Sequence[str]) -> str:
        """Run a command and return stdout and stderr combined.

        Args:
            args: Command and its arguments.

        Returns:
            Decoded combined output.

        Raises:
            CommandError: If the command cannot be started or exits non-zero.
        """
        ...


class CommandError(Exception):
    """Raised when a host command fails."""

    pass


class NotifierPort(Protocol):
    """Protocol for the catalog sink.

    Receives one complete catalog per successful scan cycle; delivery is
    sequential and never overlaps.
    """

    def notify(self, tree: DeviceTree) -> None:
        """Publish a freshly built device catalog.

        Args:
            tree: Catalog from the latest scan cycle.
        """
        ...


__all__ = [
    "CommandError",
    "CommandRunnerPort",
    "NotifierPort",
]
