"""
Target selection — narrows a plan to the packages an invocation touches.

A simplified version of cargo's own package selection:

- ``-p``/``--package`` flags name the target packages explicitly;
- otherwise the target is the workspace member whose manifest
  directory is the closest ancestor of the working directory.

If a named package is not a workspace member, everything is a target:
regenerating too much beats regenerating too little.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePath

from pxgen.core.models.unit import CodegenUnit
from pxgen.core.models.workspace import PackageGraph

logger = logging.getLogger(__name__)


def extract_package_filters(args: list[str]) -> list[str]:
    """Collect the values of every ``-p``/``--package`` flag in ``args``.

    ``args`` are the arguments that follow the cargo sub-command.
    Scanning stops at ``--``.
    """
    specs: list[str] = []
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--":
            break
        if arg in ("-p", "--package"):
            if i + 1 < len(args):
                specs.append(args[i + 1])
            i += 2
            continue
        if arg.startswith("--package="):
            specs.append(arg.split("=", 1)[1])
        elif arg.startswith("-p") and not arg.startswith("--") and len(arg) > 2:
            specs.append(arg[2:].lstrip("="))
        i += 1
    return [spec for spec in specs if spec]


def find_implicit_target(working_directory: Path, graph: PackageGraph) -> str | None:
    """The member whose manifest directory is closest above ``working_directory``."""
    root = Path(graph.workspace_root)
    try:
        relative: PurePath = working_directory.relative_to(root)
    except ValueError:
        relative = working_directory

    best: tuple[int, str, str] | None = None
    for directory, package in graph.members_by_path():
        try:
            suffix = relative.relative_to(directory)
        except ValueError:
            continue
        depth = len([part for part in suffix.parts if part not in ("", ".")])
        candidate = (depth, directory.as_posix(), package.id)
        if best is None or candidate < best:
            best = candidate

    return best[2] if best else None


def determine_targets(
    args: list[str],
    working_directory: Path,
    graph: PackageGraph,
) -> list[str]:
    """Determine the target package ids for this invocation.

    Returns:
        Package ids; an empty list means "everything".
    """
    specs = extract_package_filters(args)

    if not specs:
        logger.debug(
            "No package specs provided, determining the target based on "
            "the current working directory"
        )
        implicit = find_implicit_target(working_directory, graph)
        return [implicit] if implicit else []

    logger.debug("Extracted the following package specs for this invocation: %s", specs)

    package_ids: list[str] = []
    for spec in specs:
        package = graph.member_by_name(spec)
        if package is None:
            logger.debug("`%s` is not a workspace member, targeting everything", spec)
            return []
        package_ids.append(package.id)
    return package_ids


def filter_plan(
    plan: list[CodegenUnit],
    targets: list[str],
    graph: PackageGraph,
) -> list[CodegenUnit]:
    """Keep the units a target is, or depends on. Order is preserved."""
    if not targets:
        return list(plan)

    depends = graph.new_depends_cache()
    retained = [
        unit
        for unit in plan
        if any(
            unit.package_id == target or depends.depends_on(target, unit.package_id)
            for target in targets
        )
    ]

    logger.debug(
        "Retaining only the following codegen units for this invocation: %s",
        [unit.package_name for unit in retained],
    )
    return retained
