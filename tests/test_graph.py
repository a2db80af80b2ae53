"""
Tests for the augmented dependency graph and cycle detection.
"""

import pytest

from pxgen.core.config.manifest import extract_codegen_units
from pxgen.core.engine.cycles import cyclic_dependency_error, find_cycles
from pxgen.core.engine.graph import DependencyGraph, EdgeKind, build_graph
from pxgen.core.errors import ConfigErrors, CyclicDependencyError
from tests.helpers import WorkspaceBuilder, package_id, px_metadata

# ── Graph construction ───────────────────────────────────────────────


class TestBuildGraph:
    def test_members_are_nodes(self, workspace: WorkspaceBuilder):
        workspace.package("a")
        workspace.package("b")
        graph = build_graph(workspace.build(), [])
        assert set(graph.nodes) == {package_id("a"), package_id("b")}
        assert graph.edges == {}

    def test_depends_on_edges_point_at_dependency(self, workspace: WorkspaceBuilder):
        workspace.package("core")
        workspace.package("app", deps=["core"])
        graph = build_graph(workspace.build(), [])
        app, core = graph.index[package_id("app")], graph.index[package_id("core")]
        assert graph.edge(app, core).kind is EdgeKind.DEPENDS_ON

    def test_external_dependencies_are_excluded(self, workspace: WorkspaceBuilder):
        workspace.package("serde", member=False)
        workspace.package("app", deps=["serde"])
        graph = build_graph(workspace.build(), [])
        assert package_id("serde") not in graph.index

    def test_external_dependents_are_included(self, workspace: WorkspaceBuilder):
        workspace.package("core")
        workspace.package("plugin", deps=["core"], member=False)
        workspace.package("host", deps=["plugin"], member=False)
        graph = build_graph(workspace.build(), [])
        assert package_id("plugin") in graph.index
        assert package_id("host") in graph.index
        host, plugin = graph.index[package_id("host")], graph.index[package_id("plugin")]
        assert (host, plugin) in graph.edges

    def test_dev_dependencies_are_skipped(self, workspace: WorkspaceBuilder):
        workspace.package("core")
        workspace.package("app", dev_deps=["core"])
        graph = build_graph(workspace.build(), [])
        assert graph.edges == {}

    def test_generated_by_edge(self, workspace: WorkspaceBuilder):
        workspace.package("generator", bins=["bp"])
        workspace.package("app", metadata=px_metadata("bp"))
        package_graph = workspace.build()
        units = extract_codegen_units(package_graph)
        graph = build_graph(package_graph, units)

        app, gen = graph.index[package_id("app")], graph.index[package_id("generator")]
        edge = graph.edge(app, gen)
        assert edge.kind is EdgeKind.GENERATED_BY
        assert edge.unit == units[0]
        assert graph.units() == units

    def test_generated_by_replaces_parallel_depends_on(self, workspace: WorkspaceBuilder):
        workspace.package("generator", bins=["bp"])
        workspace.package("app", deps=["generator"], metadata=px_metadata("bp"))
        package_graph = workspace.build()
        units = extract_codegen_units(package_graph)
        graph = build_graph(package_graph, units)

        app, gen = graph.index[package_id("app")], graph.index[package_id("generator")]
        assert graph.edge(app, gen).kind is EdgeKind.GENERATED_BY
        assert graph.outgoing[app] == [gen]


class TestDependencyGraph:
    def test_add_node_is_idempotent(self):
        graph = DependencyGraph()
        assert graph.add_node("a") == graph.add_node("a")
        assert len(graph) == 1

    def test_sources(self):
        graph = DependencyGraph()
        a, b, c = graph.add_node("a"), graph.add_node("b"), graph.add_node("c")
        graph.update_edge(a, b, EdgeKind.DEPENDS_ON)
        graph.update_edge(b, c, EdgeKind.DEPENDS_ON)
        assert graph.sources() == [a]
        assert graph.incoming_edges(c)[0].source == b


# ── Cycle detection ──────────────────────────────────────────────────


def _graph(edges: list[tuple[str, str]]) -> DependencyGraph:
    graph = DependencyGraph()
    for source, target in edges:
        graph.update_edge(graph.add_node(source), graph.add_node(target), EdgeKind.DEPENDS_ON)
    return graph


class TestFindCycles:
    def test_acyclic(self):
        graph = _graph([("a", "b"), ("b", "c"), ("a", "c")])
        assert find_cycles(graph) == []

    def test_two_node_cycle(self):
        graph = _graph([("a", "b"), ("b", "a")])
        cycles = find_cycles(graph)
        assert len(cycles) == 1
        assert {graph.nodes[n] for n in cycles[0]} == {"a", "b"}

    def test_self_loop(self):
        graph = _graph([("a", "a")])
        assert find_cycles(graph) == [[0]]

    def test_one_cycle_per_disjoint_component(self):
        graph = _graph([("a", "b"), ("b", "a"), ("x", "y"), ("y", "z"), ("z", "x")])
        cycles = find_cycles(graph)
        assert len(cycles) >= 2
        found = [{graph.nodes[n] for n in cycle} for cycle in cycles]
        assert {"a", "b"} in found
        assert {"x", "y", "z"} in found

    def test_deep_chain_does_not_recurse(self):
        edges = [(f"n{i}", f"n{i + 1}") for i in range(5000)]
        graph = _graph(edges)
        assert find_cycles(graph) == []

    def test_error_rendering(self):
        graph = _graph([("a", "b")])
        graph.update_edge(graph.index["b"], graph.index["a"], EdgeKind.GENERATED_BY)
        cycle = find_cycles(graph)[0]
        error = cyclic_dependency_error(cycle, graph)
        message = str(error)
        assert message.startswith("There is a cyclic dependency in your workspace")
        assert "- `a` depends on `b`" in message
        assert "- `b` is generated by `a`" in message
        assert set(error.cycle) == {"a", "b"}


class TestCycleRejection:
    def test_generator_depending_on_its_target(self, workspace: WorkspaceBuilder):
        # `a` is generated by a binary in `b`, and `b` depends on `a`.
        workspace.package("b", deps=["a"], bins=["gen"])
        workspace.package("a", metadata=px_metadata("gen"))
        package_graph = workspace.build()
        units = extract_codegen_units(package_graph)

        with pytest.raises(ConfigErrors) as exc:
            build_graph(package_graph, units)

        errors = exc.value.errors
        assert len(errors) == 1
        assert isinstance(errors[0], CyclicDependencyError)
        message = str(errors[0])
        assert "`a` is generated by `b`" in message
        assert "`b` depends on `a`" in message

    def test_mutual_generators(self, workspace: WorkspaceBuilder):
        workspace.package("a", bins=["gen_b"], metadata=px_metadata("gen_a"))
        workspace.package("b", bins=["gen_a"], metadata=px_metadata("gen_b"))
        package_graph = workspace.build()
        units = extract_codegen_units(package_graph)

        with pytest.raises(ConfigErrors) as exc:
            build_graph(package_graph, units)
        assert all(isinstance(e, CyclicDependencyError) for e in exc.value.errors)
