"""
Cargo metadata provider — builds the package graph from ``cargo metadata``.

Runs ``cargo metadata --format-version 1`` in the working directory
and translates its JSON into a ``PackageGraph``:

- ``packages[]`` → ids, names, manifest paths, targets, metadata tables
- ``resolve.nodes[].deps[]`` → resolved dependency edges; an edge is
  dev-only when every one of its ``dep_kinds`` is ``"dev"``
- ``workspace_members`` / ``workspace_root`` → the workspace itself
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pxgen.adapters.base import MetadataProvider
from pxgen.core.errors import MetadataError
from pxgen.core.models.workspace import BuildTarget, Dependency, Package, PackageGraph

logger = logging.getLogger(__name__)


class CargoMetadataProvider(MetadataProvider):
    """Fetch the package graph by shelling out to cargo."""

    def __init__(self, cargo: str = "cargo"):
        self._cargo = cargo

    @property
    def name(self) -> str:
        return "cargo"

    def is_available(self) -> bool:
        return shutil.which(self._cargo) is not None

    def fetch(self, working_directory: Path) -> PackageGraph:
        cmd = [self._cargo, "metadata", "--format-version", "1"]
        logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), working_directory)
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                cwd=working_directory,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise MetadataError("Failed to execute `cargo metadata`") from e

        if result.returncode != 0:
            raise MetadataError("Failed to execute `cargo metadata`") from MetadataError(
                result.stderr.strip() or f"cargo exited with code {result.returncode}"
            )

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise MetadataError(
                "Failed to build a package graph starting from the output of `cargo metadata`"
            ) from e

        graph = parse_cargo_metadata(data)
        logger.debug(
            "Computed package graph (%d packages) in %.3fs",
            len(graph.packages),
            time.monotonic() - start,
        )
        return graph


def parse_cargo_metadata(data: dict[str, Any]) -> PackageGraph:
    """Translate ``cargo metadata`` JSON into a ``PackageGraph``.

    Raises:
        MetadataError: If the document doesn't have the expected shape.
    """
    if not isinstance(data, dict):
        raise MetadataError(f"Expected a JSON object, got {type(data).__name__}")

    try:
        resolved = _resolved_dependencies(data.get("resolve"))
        packages: dict[str, Package] = {}
        for raw in data.get("packages", []):
            package_id = raw["id"]
            packages[package_id] = Package(
                id=package_id,
                name=raw["name"],
                manifest_path=raw["manifest_path"],
                targets=[
                    BuildTarget(name=t["name"], kinds=list(t.get("kind", [])))
                    for t in raw.get("targets", [])
                ],
                dependencies=resolved.get(package_id, []),
                metadata=raw.get("metadata"),
            )

        return PackageGraph(
            workspace_root=data["workspace_root"],
            member_ids=list(data.get("workspace_members", [])),
            packages=packages,
        )
    except (KeyError, TypeError, ValidationError) as e:
        raise MetadataError(
            "Failed to build a package graph starting from the output of `cargo metadata`"
        ) from e


def _resolved_dependencies(resolve: dict[str, Any] | None) -> dict[str, list[Dependency]]:
    if not resolve:
        return {}

    edges: dict[str, list[Dependency]] = {}
    for node in resolve.get("nodes", []):
        deps = []
        for dep in node.get("deps", []):
            kinds = [k.get("kind") for k in dep.get("dep_kinds", [])]
            dev_only = bool(kinds) and all(kind == "dev" for kind in kinds)
            deps.append(Dependency(package_id=dep["pkg"], dev_only=dev_only))
        edges[node["id"]] = deps
    return edges
