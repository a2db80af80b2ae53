"""
Workspace model — the package graph as reported by ``cargo metadata``.

This is a read-only view: pxgen never resolves dependencies itself,
it only walks the edges the metadata provider hands over.
"""

from __future__ import annotations

from pathlib import Path, PurePath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class BuildTarget(BaseModel):
    """A build target of a package (lib, bin, test, ...)."""

    model_config = ConfigDict(frozen=True)

    name: str
    kinds: list[str] = Field(default_factory=list)

    @property
    def is_binary(self) -> bool:
        return "bin" in self.kinds


class Dependency(BaseModel):
    """A direct dependency edge, pointing at a resolved package id."""

    model_config = ConfigDict(frozen=True)

    package_id: str
    dev_only: bool = False


class Package(BaseModel):
    """A package known to the metadata provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    manifest_path: str
    targets: list[BuildTarget] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)
    metadata: Any = None            # raw [package.metadata] table

    @property
    def manifest_dir(self) -> Path:
        return Path(self.manifest_path).parent

    def binary(self, name: str) -> BuildTarget | None:
        """Look up a binary target by name."""
        for target in self.targets:
            if target.is_binary and target.name == name:
                return target
        return None


class PackageGraph(BaseModel):
    """All packages of a workspace plus everything they depend on.

    ``member_ids`` lists the workspace members in the order the
    provider reported them; ``packages`` holds every package,
    members and external dependencies alike.
    """

    workspace_root: str
    member_ids: list[str] = Field(default_factory=list)
    packages: dict[str, Package] = Field(default_factory=dict)

    _reverse: dict[str, list[tuple[str, bool]]] | None = PrivateAttr(default=None)

    def metadata(self, package_id: str) -> Package:
        """Return the package with the given id.

        Raises:
            KeyError: If the id is unknown.
        """
        return self.packages[package_id]

    def members(self) -> list[Package]:
        return [self.packages[pid] for pid in self.member_ids]

    def member_by_name(self, name: str) -> Package | None:
        for package in self.members():
            if package.name == name:
                return package
        return None

    def members_by_path(self) -> list[tuple[PurePath, Package]]:
        """Workspace members keyed by manifest directory, relative to the root.

        Members outside the workspace root keep their absolute path.
        """
        root = Path(self.workspace_root)
        result = []
        for package in self.members():
            directory = package.manifest_dir
            try:
                directory = directory.relative_to(root)
            except ValueError:
                pass
            result.append((directory, package))
        return sorted(result, key=lambda item: item[0].as_posix())

    def reverse_dependencies(self, package_id: str) -> list[tuple[str, bool]]:
        """Direct dependents of ``package_id`` as ``(dependent_id, dev_only)`` pairs."""
        reverse = self._reverse_index()
        return list(reverse.get(package_id, []))

    def depends_on(self, package_id: str, dependency_id: str) -> bool:
        """Whether ``package_id`` transitively depends on ``dependency_id``."""
        return self.new_depends_cache().depends_on(package_id, dependency_id)

    def new_depends_cache(self) -> DependsCache:
        return DependsCache(self)

    def _reverse_index(self) -> dict[str, list[tuple[str, bool]]]:
        if self._reverse is not None:
            return self._reverse
        reverse: dict[str, list[tuple[str, bool]]] = {}
        for package in self.packages.values():
            for dep in package.dependencies:
                reverse.setdefault(dep.package_id, []).append((package.id, dep.dev_only))
        self._reverse = reverse
        return reverse


class DependsCache:
    """Memoised transitive ``depends_on`` queries over a ``PackageGraph``.

    Every dependency edge counts here, dev-only ones included: a
    package's tests need its dev-dependencies built too.
    """

    def __init__(self, graph: PackageGraph):
        self._graph = graph
        self._closures: dict[str, frozenset[str]] = {}

    def depends_on(self, package_id: str, dependency_id: str) -> bool:
        if package_id == dependency_id:
            return False
        return dependency_id in self._closure(package_id)

    def _closure(self, package_id: str) -> frozenset[str]:
        if package_id in self._closures:
            return self._closures[package_id]

        reached: set[str] = set()
        stack = [package_id]
        while stack:
            current = stack.pop()
            package = self._graph.packages.get(current)
            if package is None:
                continue
            for dep in package.dependencies:
                if dep.package_id not in reached:
                    reached.add(dep.package_id)
                    stack.append(dep.package_id)

        closure = frozenset(reached)
        self._closures[package_id] = closure
        return closure
