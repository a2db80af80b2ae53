"""
Plan executor — compiles and runs generators (or verifiers) in order.

For every unit of the plan:

    compile binary → run binary with the workspace env → next unit

Each step is one blocking external process. The first failure aborts
the rest of the plan; units that already ran are not rolled back,
since regeneration is expected to be idempotent.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pxgen.adapters.base import ProcessRunner
from pxgen.core.errors import CommandError, MissingVerifierError, ProcessFailure
from pxgen.core.models.receipt import Receipt
from pxgen.core.models.unit import CodegenUnit, Invocation, ProcessCommand
from pxgen.env import GENERATED_PKG_MANIFEST_PATH_ENV, WORKSPACE_ROOT_DIR_ENV

logger = logging.getLogger(__name__)

Role = Literal["generator", "verifier"]

_ROLE_LABELS: dict[str, str] = {
    "generator": "the code generator",
    "verifier": "the verifier",
}
_RUN_VERBS: dict[str, tuple[str, str]] = {
    "generator": ("Generating", "Generated"),
    "verifier": ("Verifying", "Verified"),
}


class StatusReporter:
    """Receives human-facing progress lines. The default only logs them."""

    def status(self, verb: str, message: str) -> None:
        logger.info("%s %s", verb, message)


@dataclass
class ExecutionReport:
    """What happened while executing a plan."""

    mode: str = "generate"
    receipts: list[Receipt] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)   # package names

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def all_ok(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "status": "ok" if self.all_ok else "failed",
            "completed": list(self.completed),
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


class PlanExecutor:
    """Walks a plan, one external process at a time.

    Args:
        runner: Spawns the compile/run commands.
        cargo: Path to the cargo binary.
        workspace_root: Canonical workspace root, exported to every child.
        quiet: Pass ``--quiet`` to child cargo invocations.
        reporter: Receives status lines.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        cargo: str,
        workspace_root: Path,
        quiet: bool = False,
        reporter: StatusReporter | None = None,
    ):
        self.runner = runner
        self.cargo = cargo
        self.workspace_root = workspace_root
        self.quiet = quiet
        self.reporter = reporter or StatusReporter()
        self.report = ExecutionReport()

    def generate(self, plan: list[CodegenUnit]) -> ExecutionReport:
        """Regenerate every unit of the plan, in order.

        Raises:
            ProcessFailure: On the first compile or run step that fails.
        """
        self.report = ExecutionReport(mode="generate")
        for unit in plan:
            self._invoke(unit, unit.generator, "generator")
            self.report.completed.append(unit.package_name)
        return self.report

    def verify(self, plan: list[CodegenUnit]) -> ExecutionReport:
        """Check every unit of the plan for freshness, in order.

        Raises:
            MissingVerifierError: When a unit has no verifier.
            ProcessFailure: On the first compile or run step that fails.
        """
        self.report = ExecutionReport(mode="verify")
        for unit in plan:
            if unit.verifier is None:
                raise MissingVerifierError(unit.package_name)
            self._invoke(unit, unit.verifier, "verifier")
            self.report.completed.append(unit.package_name)
        return self.report

    def _invoke(self, unit: CodegenUnit, invocation: Invocation, role: Role) -> None:
        binary = invocation.binary.name
        package = unit.package_name
        label = f"`{binary}`, {_ROLE_LABELS[role]} for `{package}`"
        root_env = {WORKSPACE_ROOT_DIR_ENV: str(self.workspace_root)}

        # Compile
        timer = time.monotonic()
        self.reporter.status("Compiling", label)
        command = invocation.build_command(
            self.cargo, self.quiet, command_id=f"{package}:compile-{role}"
        ).with_env(**root_env)
        self._run(command, f"Failed to compile {label}")
        self.reporter.status("Compiled", f"{label}, in {time.monotonic() - timer:.3f}s")

        # Run
        running, done = _RUN_VERBS[role]
        timer = time.monotonic()
        self.reporter.status(running, f"`{package}`")
        command = invocation.run_command(
            self.cargo, self.quiet, command_id=f"{package}:run-{role}"
        ).with_env(
            **root_env,
            **{GENERATED_PKG_MANIFEST_PATH_ENV: unit.manifest_path},
        )
        self._run(command, f"Failed to run {label}")
        self.reporter.status(done, f"`{package}` in {time.monotonic() - timer:.3f}s")

    def _run(self, command: ProcessCommand, error_message: str) -> Receipt:
        logger.debug("Executing %s: %s", command.id, " ".join(command.argv))
        receipt = self.runner.run(command)
        self.report.receipts.append(receipt)

        if receipt.failed:
            logger.debug("✗ %s → %s", command.id, receipt.error)
            cause = receipt.error or f"exited with status {receipt.return_code}"
            raise ProcessFailure(
                error_message,
                command_id=command.id,
                return_code=receipt.return_code,
            ) from CommandError(cause)

        logger.debug("✓ %s (%dms)", command.id, receipt.duration_ms)
        return receipt
