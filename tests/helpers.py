"""
In-memory workspace builder for tests.

Builds a ``PackageGraph`` the way ``cargo metadata`` would describe it,
with real manifest directories under a temporary root so path-based
logic (implicit targets, canonical roots) behaves as in production.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pxgen.core.models.workspace import BuildTarget, Dependency, Package, PackageGraph


def px_metadata(
    generator: str,
    args: list[str] | None = None,
    verifier: str | None = None,
    verifier_args: list[str] | None = None,
) -> dict[str, Any]:
    """A ``[package.metadata]`` table declaring a codegen unit."""
    px: dict[str, Any] = {
        "generate": {
            "generator_type": "cargo_workspace_binary",
            "generator_name": generator,
            "generator_args": args or [],
        }
    }
    if verifier is not None:
        px["verify"] = {
            "verifier_type": "cargo_workspace_binary",
            "verifier_name": verifier,
            "verifier_args": verifier_args or [],
        }
    return {"px": px}


def package_id(name: str) -> str:
    return f"path+file:///ws/{name}#0.1.0"


class WorkspaceBuilder:
    """Declare packages by name, then ``build()`` the graph."""

    def __init__(self, root: Path):
        self.root = root
        self._specs: list[dict[str, Any]] = []

    def package(
        self,
        name: str,
        deps: tuple[str, ...] | list[str] = (),
        dev_deps: tuple[str, ...] | list[str] = (),
        bins: tuple[str, ...] | list[str] = (),
        metadata: Any = None,
        member: bool = True,
        path: str | None = None,
    ) -> str:
        """Declare a package; returns its id."""
        relative = path if path is not None else f"crates/{name}"
        manifest_dir = self.root / relative if member else self.root.parent / "registry" / name
        manifest_dir.mkdir(parents=True, exist_ok=True)
        self._specs.append(
            {
                "id": package_id(name),
                "name": name,
                "manifest_path": str(manifest_dir / "Cargo.toml"),
                "deps": list(deps),
                "dev_deps": list(dev_deps),
                "bins": list(bins),
                "metadata": metadata,
                "member": member,
            }
        )
        return package_id(name)

    def build(self) -> PackageGraph:
        packages: dict[str, Package] = {}
        for spec in self._specs:
            dependencies = [Dependency(package_id=package_id(d)) for d in spec["deps"]]
            dependencies += [
                Dependency(package_id=package_id(d), dev_only=True) for d in spec["dev_deps"]
            ]
            targets = [BuildTarget(name=spec["name"].replace("-", "_"), kinds=["lib"])]
            targets += [BuildTarget(name=b, kinds=["bin"]) for b in spec["bins"]]
            packages[spec["id"]] = Package(
                id=spec["id"],
                name=spec["name"],
                manifest_path=spec["manifest_path"],
                targets=targets,
                dependencies=dependencies,
                metadata=spec["metadata"],
            )
        return PackageGraph(
            workspace_root=str(self.root),
            member_ids=[s["id"] for s in self._specs if s["member"]],
            packages=packages,
        )
