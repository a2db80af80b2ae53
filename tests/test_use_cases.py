"""
Tests for the codegen use case — the whole pipeline with in-memory adapters.
"""

from pathlib import Path

import pytest

from pxgen.adapters.mock import MockRunner, StaticMetadataProvider
from pxgen.core.errors import (
    ConfigErrors,
    CyclicDependencyError,
    MetadataError,
    MissingBinaryError,
    MissingVerifierError,
    ProcessFailure,
    PxError,
)
from pxgen.core.models.workspace import PackageGraph
from pxgen.core.use_cases.codegen import (
    canonical_workspace_root,
    compute_filtered_plan,
    run_codegen,
    run_verify,
)
from tests.helpers import WorkspaceBuilder, package_id, px_metadata


@pytest.fixture
def chain_graph(workspace: WorkspaceBuilder) -> PackageGraph:
    workspace.package("generator", bins=["gen", "check"])
    workspace.package("c", metadata=px_metadata("gen", verifier="check"))
    workspace.package("b", deps=["c"], metadata=px_metadata("gen", verifier="check"))
    workspace.package("a", deps=["b"], metadata=px_metadata("gen", verifier="check"))
    return workspace.build()


class TestComputeFilteredPlan:
    def test_everything_from_workspace_root(self, chain_graph, workspace_root: Path):
        targets, plan = compute_filtered_plan(chain_graph, workspace_root, [])
        assert targets == []
        assert [u.package_name for u in plan] == ["c", "b", "a"]

    def test_implicit_target(self, chain_graph, workspace_root: Path):
        targets, plan = compute_filtered_plan(chain_graph, workspace_root / "crates" / "b", [])
        assert targets == [package_id("b")]
        assert [u.package_name for u in plan] == ["c", "b"]

    def test_explicit_target(self, chain_graph, workspace_root: Path):
        _, plan = compute_filtered_plan(chain_graph, workspace_root, ["-p", "c"])
        assert [u.package_name for u in plan] == ["c"]

    def test_cycles_outside_targets_still_reject(self, workspace: WorkspaceBuilder, workspace_root: Path):
        workspace.package("x", bins=["gen_y"], metadata=px_metadata("gen_x"))
        workspace.package("y", bins=["gen_x"], metadata=px_metadata("gen_y"))
        workspace.package("app")
        with pytest.raises(ConfigErrors):
            compute_filtered_plan(workspace.build(), workspace_root, ["-p", "app"])


class TestCanonicalWorkspaceRoot:
    def test_resolves(self, workspace_root: Path):
        graph = PackageGraph(workspace_root=str(workspace_root / "crates" / ".."))
        (workspace_root / "crates").mkdir()
        assert canonical_workspace_root(graph) == workspace_root

    def test_missing_directory(self, tmp_path: Path):
        graph = PackageGraph(workspace_root=str(tmp_path / "gone"))
        with pytest.raises(PxError, match="canonical path") as exc:
            canonical_workspace_root(graph)
        assert isinstance(exc.value.__cause__, OSError)


# ── Full pipeline ────────────────────────────────────────────────────


class TestRunCodegen:
    def test_success(self, chain_graph, workspace_root: Path, mock_runner: MockRunner):
        result = run_codegen(
            "cargo",
            workspace_root,
            [],
            provider=StaticMetadataProvider(chain_graph),
            runner=mock_runner,
        )
        assert result.ok
        assert result.workspace_root == workspace_root
        assert result.report.completed == ["c", "b", "a"]
        assert mock_runner.call_count == 6
        data = result.to_dict()
        assert data["plan"] == ["c", "b", "a"]
        assert data["report"]["status"] == "ok"

    def test_metadata_failure(self, workspace_root: Path, mock_runner: MockRunner):
        result = run_codegen(
            "cargo",
            workspace_root,
            [],
            provider=StaticMetadataProvider(error="no Cargo.toml"),
            runner=mock_runner,
        )
        assert not result.ok
        assert isinstance(result.errors[0], MetadataError)
        assert mock_runner.call_count == 0

    def test_config_errors_are_all_reported(
        self, workspace: WorkspaceBuilder, workspace_root: Path, mock_runner: MockRunner
    ):
        workspace.package("a", metadata=px_metadata("nope_a"))
        workspace.package("b", metadata=px_metadata("nope_b"))
        result = run_codegen(
            "cargo",
            workspace_root,
            [],
            provider=StaticMetadataProvider(workspace.build()),
            runner=mock_runner,
        )
        assert len(result.errors) == 2
        assert all(isinstance(e, MissingBinaryError) for e in result.errors)
        assert mock_runner.call_count == 0

    def test_cycle_is_reported(
        self, workspace: WorkspaceBuilder, workspace_root: Path, mock_runner: MockRunner
    ):
        workspace.package("b", deps=["a"], bins=["gen"])
        workspace.package("a", metadata=px_metadata("gen"))
        result = run_codegen(
            "cargo",
            workspace_root,
            [],
            provider=StaticMetadataProvider(workspace.build()),
            runner=mock_runner,
        )
        assert isinstance(result.errors[0], CyclicDependencyError)
        assert mock_runner.call_count == 0

    def test_execution_failure(self, chain_graph, workspace_root: Path, mock_runner: MockRunner):
        mock_runner.set_failure("b:run-generator")
        result = run_codegen(
            "cargo",
            workspace_root,
            [],
            provider=StaticMetadataProvider(chain_graph),
            runner=mock_runner,
        )
        assert isinstance(result.errors[0], ProcessFailure)
        assert result.report.completed == ["c"]
        assert "a:compile-generator" not in mock_runner.called_ids

    def test_quiet_is_forwarded(self, chain_graph, workspace_root: Path, mock_runner: MockRunner):
        run_codegen(
            "cargo",
            workspace_root,
            ["-p", "c"],
            provider=StaticMetadataProvider(chain_graph),
            runner=mock_runner,
            quiet=True,
        )
        assert all("--quiet" in c.argv for c in mock_runner.call_log)


class TestRunVerify:
    def test_success(self, chain_graph, workspace_root: Path, mock_runner: MockRunner):
        result = run_verify(
            "cargo",
            workspace_root,
            [],
            provider=StaticMetadataProvider(chain_graph),
            runner=mock_runner,
        )
        assert result.ok
        assert result.mode == "verify"
        assert all(cid.endswith("-verifier") for cid in mock_runner.called_ids)

    def test_missing_verifier(
        self, workspace: WorkspaceBuilder, workspace_root: Path, mock_runner: MockRunner
    ):
        workspace.package("generator", bins=["gen"])
        workspace.package("app", metadata=px_metadata("gen"))
        result = run_verify(
            "cargo",
            workspace_root,
            [],
            provider=StaticMetadataProvider(workspace.build()),
            runner=mock_runner,
        )
        assert isinstance(result.errors[0], MissingVerifierError)
        assert mock_runner.call_count == 0
