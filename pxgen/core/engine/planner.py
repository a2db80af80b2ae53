"""
Plan scheduler — orders codegen units so each runs after what it needs.

A post-order depth-first walk from every source node (nothing depends
on it) over outgoing edges. A node finishes only after everything it
depends on, directly or through a generator, has finished. The unit
that regenerates a package is appended when that package's node
finishes, so by then:

- its generator package has finished, and with it the units of every
  package the generator needs to compile;
- every package it depends on has finished, and with it their units.

Execution is strictly sequential: the returned order *is* the
execution order.
"""

from __future__ import annotations

import logging

from pxgen.core.engine.graph import DependencyGraph, EdgeKind, build_graph
from pxgen.core.models.unit import CodegenUnit
from pxgen.core.models.workspace import PackageGraph

logger = logging.getLogger(__name__)


def _sorted_sources(graph: DependencyGraph) -> list[int]:
    return sorted(graph.sources(), key=lambda node: (graph.names[node], graph.nodes[node]))


def post_order(graph: DependencyGraph) -> list[int]:
    """All nodes reachable from a source, each after its outgoing neighbours."""
    if not graph.nodes:
        return []

    sources = _sorted_sources(graph)
    # Always true for an acyclic, non-empty graph.
    assert sources, "an acyclic dependency graph must have a source node"

    visited: set[int] = set()
    finished: list[int] = []

    for source in sources:
        if source in visited:
            continue
        visited.add(source)
        stack: list[tuple[int, list[int]]] = [(source, list(graph.outgoing[source]))]

        while stack:
            node, pending = stack[-1]
            while pending and pending[0] in visited:
                pending.pop(0)
            if pending:
                neighbour = pending.pop(0)
                visited.add(neighbour)
                stack.append((neighbour, list(graph.outgoing[neighbour])))
            else:
                stack.pop()
                finished.append(node)

    return finished


def codegen_plan(graph: DependencyGraph) -> list[CodegenUnit]:
    """Return the codegen units of ``graph`` in a safe execution order.

    Args:
        graph: An acyclic augmented dependency graph.

    Returns:
        One entry per unit, dependencies first.
    """
    plan: list[CodegenUnit] = []
    for node in post_order(graph):
        for edge in graph.outgoing_edges(node):
            if edge.kind is EdgeKind.GENERATED_BY and edge.unit is not None:
                plan.append(edge.unit)

    logger.debug("Codegen plan: %s", [unit.package_name for unit in plan])
    return plan


def compute_plan(package_graph: PackageGraph, units: list[CodegenUnit]) -> list[CodegenUnit]:
    """Build the augmented graph (rejecting cycles) and schedule its units.

    Raises:
        ConfigErrors: One ``CyclicDependencyError`` per detected cycle.
    """
    return codegen_plan(build_graph(package_graph, units))
