"""Inbound port interfaces for the QAT plugin.

Inbound ports define what the plugin offers to the device plugin server.
The server itself (registration, ListAndWatch, Allocate RPCs) lives outside
this package.
"""

from __future__ import annotations

from typing import Optional, Protocol

from qat_plugin.domain.entities.allocation import AllocateResponse
from qat_plugin.ports.outbound import NotifierPort


class Scanner(Protocol):
    """Discovers devices and feeds catalogs to a notifier."""

    def scan(self, notifier: NotifierPort, max_cycles: Optional[int] = None) -> None:
        """Scan the host in a loop and publish each catalog.

        Args:
            notifier: Catalog sink.
            max_cycles: Stop after this many cycles (None = forever).

        Raises:
            Exception: Any enumeration, configuration or catalog error.
        """
        ...


class PostAllocator(Protocol):
    """Rewrites allocate responses before they reach the orchestrator."""

    def post_allocate(self, response: AllocateResponse) -> None:
        """Modify an allocate response in place.

        Args:
            response: Response built by the default allocator.
        """
        ...
