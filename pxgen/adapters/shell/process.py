"""
Subprocess runner — spawns generator/verifier commands for real.

Output is not captured: the child's stdout/stderr are inherited so
cargo's and the generator's own output streams straight through to
the user. There is no timeout; a step runs until it exits or the
whole pipeline is interrupted.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time

from pxgen.adapters.base import ProcessRunner
from pxgen.core.models.receipt import Receipt
from pxgen.core.models.unit import ProcessCommand

logger = logging.getLogger(__name__)


class SubprocessRunner(ProcessRunner):
    """Run commands with ``subprocess.run`` and inherited stdio."""

    @property
    def name(self) -> str:
        return "subprocess"

    def is_available(self) -> bool:
        return shutil.which("cargo") is not None or "CARGO" in os.environ

    def run(self, command: ProcessCommand) -> Receipt:
        env = os.environ.copy()
        env.update(command.env)

        logger.debug("Spawning: %s (cwd=%s)", " ".join(command.argv), command.cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(command.argv, env=env, cwd=command.cwd, check=False)
        except OSError as e:
            return Receipt.failure(
                runner=self.name,
                command_id=command.id,
                argv=command.argv,
                error=f"Failed to spawn `{command.argv[0]}`: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)

        if result.returncode == 0:
            return Receipt.success(
                runner=self.name,
                command_id=command.id,
                argv=command.argv,
                duration_ms=elapsed_ms,
            )

        return Receipt.failure(
            runner=self.name,
            command_id=command.id,
            argv=command.argv,
            error=f"Command exited with code {result.returncode}",
            return_code=result.returncode,
            duration_ms=elapsed_ms,
        )
