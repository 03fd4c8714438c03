"""Run the QAT device plugin scan loop."""

from __future__ import annotations

import sys

from qat_plugin.adapters.outbound.logging_notifier import LoggingNotifier
from qat_plugin.infrastructure.container import Container


def main() -> int:
    container = Container.create()
    notifier = LoggingNotifier(container.metrics)
    max_cycles = 1 if container.config.plugin.one_shot else None

    container.logger.info("qat_device_plugin_started")
    try:
        container.plugin.scan(notifier, max_cycles=max_cycles)
    except Exception as e:
        container.logger.error("scan_failed", error=str(e), exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
