"""
Codegen use case — the full vertical slice from invocation to generated code.

    fetch package graph → extract units → plan (rejecting cycles)
        → narrow to targets → generate / verify

Configuration errors are aggregated; execution errors are fail-fast.
Either way they end up in ``PipelineResult.errors`` rather than being
raised, so the CLI decides how to present them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pxgen.adapters.base import MetadataProvider, ProcessRunner
from pxgen.core.config.manifest import extract_codegen_units
from pxgen.core.engine.executor import ExecutionReport, PlanExecutor, StatusReporter
from pxgen.core.engine.planner import compute_plan
from pxgen.core.engine.targets import determine_targets, filter_plan
from pxgen.core.errors import ConfigErrors, MetadataError, PxError
from pxgen.core.models.unit import CodegenUnit
from pxgen.core.models.workspace import PackageGraph

logger = logging.getLogger(__name__)

Mode = Literal["generate", "verify"]


@dataclass
class PipelineResult:
    """Result of one pipeline run."""

    mode: Mode = "generate"
    workspace_root: Path | None = None
    targets: list[str] = field(default_factory=list)
    plan: list[CodegenUnit] = field(default_factory=list)
    report: ExecutionReport | None = None
    errors: list[Exception] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        result: dict = {
            "mode": self.mode,
            "ok": self.ok,
            "workspace_root": str(self.workspace_root) if self.workspace_root else None,
            "targets": list(self.targets),
            "plan": [unit.package_name for unit in self.plan],
        }
        if self.report:
            result["report"] = self.report.to_dict()
        if self.errors:
            result["errors"] = [str(e) for e in self.errors]
        return result


def compute_filtered_plan(
    package_graph: PackageGraph,
    working_directory: Path,
    args: list[str],
) -> tuple[list[str], list[CodegenUnit]]:
    """Plan every codegen unit of the workspace, then keep the relevant ones.

    Returns:
        ``(target_ids, plan)``.

    Raises:
        ConfigErrors: Configuration or cycle errors, aggregated.
    """
    units = extract_codegen_units(package_graph)
    plan = compute_plan(package_graph, units)

    targets = determine_targets(args, working_directory, package_graph)
    logger.debug(
        "Determined the list of target packages for this invocation: %s",
        [package_graph.metadata(pid).name for pid in targets],
    )
    return targets, filter_plan(plan, targets, package_graph)


def canonical_workspace_root(package_graph: PackageGraph) -> Path:
    """The workspace root with symlinks resolved.

    Raises:
        PxError: If the directory doesn't exist.
    """
    try:
        return Path(package_graph.workspace_root).resolve(strict=True)
    except OSError as e:
        raise PxError(
            "Failed to get the canonical path to the root directory of this workspace"
        ) from e


def run_pipeline(
    mode: Mode,
    cargo: str,
    working_directory: Path,
    args: list[str],
    provider: MetadataProvider | None = None,
    runner: ProcessRunner | None = None,
    quiet: bool = False,
    reporter: StatusReporter | None = None,
) -> PipelineResult:
    """Generate (or verify) every codegen unit relevant to this invocation.

    Args:
        mode: ``"generate"`` or ``"verify"``.
        cargo: Path to the cargo binary.
        working_directory: Directory the user invoked us from.
        args: Arguments following the cargo sub-command (for ``-p`` flags).
        provider: Package graph source (default: ``cargo metadata``).
        runner: Process runner (default: real subprocesses).
        quiet: Forward ``--quiet`` to child cargo invocations.
        reporter: Receives status lines.

    Returns:
        PipelineResult; ``errors`` is empty on success.
    """
    result = PipelineResult(mode=mode)
    reporter = reporter or StatusReporter()

    if provider is None:
        from pxgen.adapters.cargo.metadata import CargoMetadataProvider

        provider = CargoMetadataProvider(cargo)
    if runner is None:
        from pxgen.adapters.shell.process import SubprocessRunner

        runner = SubprocessRunner()

    # ── Package graph ────────────────────────────────────────────
    timer = time.monotonic()
    reporter.status("Computing", "package graph")
    try:
        package_graph = provider.fetch(working_directory)
    except MetadataError as e:
        result.errors.append(e)
        return result
    reporter.status("Computed", f"package graph in {time.monotonic() - timer:.3f}s")

    # ── Plan ─────────────────────────────────────────────────────
    try:
        result.targets, result.plan = compute_filtered_plan(
            package_graph, working_directory, args
        )
    except ConfigErrors as e:
        result.errors.extend(e.errors)
        return result

    try:
        workspace_root = canonical_workspace_root(package_graph)
    except PxError as e:
        result.errors.append(e)
        return result
    result.workspace_root = workspace_root

    # ── Execute ──────────────────────────────────────────────────
    executor = PlanExecutor(
        runner=runner,
        cargo=cargo,
        workspace_root=workspace_root,
        quiet=quiet,
        reporter=reporter,
    )
    try:
        if mode == "verify":
            executor.verify(result.plan)
        else:
            executor.generate(result.plan)
    except PxError as e:
        result.errors.append(e)
    result.report = executor.report

    return result


def run_codegen(cargo: str, working_directory: Path, args: list[str], **kwargs) -> PipelineResult:
    """Regenerate the codegen units relevant to this invocation."""
    return run_pipeline("generate", cargo, working_directory, args, **kwargs)


def run_verify(cargo: str, working_directory: Path, args: list[str], **kwargs) -> PipelineResult:
    """Verify the freshness of the codegen units relevant to this invocation."""
    return run_pipeline("verify", cargo, working_directory, args, **kwargs)
