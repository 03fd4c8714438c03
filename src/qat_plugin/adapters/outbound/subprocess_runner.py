"""Subprocess-backed command runner.

Implements CommandRunnerPort with the standard subprocess module. Undecodable
bytes are replaced so that only the affected line fails to match. No timeout
is applied: a hung driver tool blocks the scan loop.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from qat_plugin.ports.outbound import CommandError

logger = logging.getLogger(__name__)


class SubprocessRunner:
    """Run host commands with stderr folded into stdout."""

    def combined_output(self, args: Sequence[str]) -> str:
        cmd = " ".join(args)
        logger.debug("Running %s", cmd)
        try:
            result = subprocess.run(
                list(args),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise CommandError(f"Can't run {cmd}: {e}") from e

        if result.returncode != 0:
            raise CommandError(
                f"{cmd} exited with status {result.returncode}: {result.stdout.strip()}"
            )
        return result.stdout
