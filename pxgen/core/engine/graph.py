"""
Augmented dependency graph — package dependencies plus codegen edges.

An ``A → B`` edge means ``A`` must be built after ``B``: either ``A``
has a non-dev dependency on ``B`` (``DEPENDS_ON``) or ``A`` is generated
by a binary defined in ``B`` (``GENERATED_BY``).

The graph only contains workspace members and the packages that
(transitively) depend on one. It is built by walking *reverse*
dependencies from the members, so the external dependency universe
never enters it.

Nodes live in an arena addressed by integer index, with a side map
from package id to index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from pxgen.core.engine.cycles import cyclic_dependency_error, find_cycles
from pxgen.core.errors import ConfigErrors
from pxgen.core.models.unit import CodegenUnit
from pxgen.core.models.workspace import PackageGraph

logger = logging.getLogger(__name__)


class EdgeKind(str, Enum):
    DEPENDS_ON = "depends on"
    GENERATED_BY = "is generated by"


@dataclass
class Edge:
    source: int
    target: int
    kind: EdgeKind
    unit: CodegenUnit | None = None


@dataclass
class DependencyGraph:
    """Directed graph over package ids, stored as an index arena."""

    nodes: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)
    index: dict[str, int] = field(default_factory=dict)
    edges: dict[tuple[int, int], Edge] = field(default_factory=dict)
    outgoing: list[list[int]] = field(default_factory=list)
    incoming: list[list[int]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def add_node(self, package_id: str, name: str = "") -> int:
        """Return the node for ``package_id``, creating it if needed."""
        if package_id in self.index:
            return self.index[package_id]
        node = len(self.nodes)
        self.nodes.append(package_id)
        self.names.append(name or package_id)
        self.index[package_id] = node
        self.outgoing.append([])
        self.incoming.append([])
        return node

    def update_edge(
        self,
        source: int,
        target: int,
        kind: EdgeKind,
        unit: CodegenUnit | None = None,
    ) -> Edge:
        """Add an edge, or replace the weight of the existing one."""
        edge = Edge(source=source, target=target, kind=kind, unit=unit)
        if (source, target) not in self.edges:
            self.outgoing[source].append(target)
            self.incoming[target].append(source)
        self.edges[(source, target)] = edge
        return edge

    def edge(self, source: int, target: int) -> Edge:
        return self.edges[(source, target)]

    def outgoing_edges(self, node: int) -> list[Edge]:
        return [self.edges[(node, target)] for target in self.outgoing[node]]

    def incoming_edges(self, node: int) -> list[Edge]:
        return [self.edges[(source, node)] for source in self.incoming[node]]

    def sources(self) -> list[int]:
        """Nodes with no incoming edges, in index order."""
        return [node for node in range(len(self.nodes)) if not self.incoming[node]]

    def units(self) -> list[CodegenUnit]:
        """Every unit attached to a ``GENERATED_BY`` edge."""
        return [
            edge.unit
            for edge in self.edges.values()
            if edge.kind is EdgeKind.GENERATED_BY and edge.unit is not None
        ]


def build_graph(package_graph: PackageGraph, units: list[CodegenUnit]) -> DependencyGraph:
    """Build the augmented dependency graph and reject cycles.

    Args:
        package_graph: Workspace metadata.
        units: Codegen units extracted from the workspace.

    Returns:
        An acyclic ``DependencyGraph``.

    Raises:
        ConfigErrors: One ``CyclicDependencyError`` per detected cycle.
    """
    graph = DependencyGraph()
    processed: set[str] = set()
    to_be_visited = list(package_graph.member_ids)

    def _node(package_id: str) -> int:
        package = package_graph.packages.get(package_id)
        return graph.add_node(package_id, package.name if package else package_id)

    while to_be_visited:
        package_id = to_be_visited.pop()
        if package_id in processed:
            continue

        node = _node(package_id)

        for dependent_id, dev_only in package_graph.reverse_dependencies(package_id):
            if dev_only:
                continue
            dependent = _node(dependent_id)
            graph.update_edge(dependent, node, EdgeKind.DEPENDS_ON)
            if dependent_id not in processed:
                to_be_visited.append(dependent_id)

        processed.add(package_id)

    for unit in units:
        # Both ends are workspace members, so both already have a node.
        target = graph.index[unit.package_id]
        generator = graph.index[unit.generator_package_id]
        graph.update_edge(target, generator, EdgeKind.GENERATED_BY, unit)

    logger.debug(
        "Built the augmented dependency graph: %d nodes, %d edges",
        len(graph.nodes),
        len(graph.edges),
    )

    cycles = find_cycles(graph)
    if cycles:
        raise ConfigErrors([cyclic_dependency_error(cycle, graph) for cycle in cycles])

    return graph
