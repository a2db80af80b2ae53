"""
Manifest configuration — reads ``[package.metadata.px]`` into codegen units.

Expected shape in a package's ``Cargo.toml``:

    [package.metadata.px.generate]
    generator_type = "cargo_workspace_binary"
    generator_name = "bp"
    generator_args = ["--some", "flag"]

    [package.metadata.px.verify]
    verifier_type = "cargo_workspace_binary"
    verifier_name = "bp_verify"

Every workspace member is checked independently and all errors are
collected, so a single run reports every misconfigured package.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from pxgen.core.errors import ConfigErrors, MalformedConfigError, MissingBinaryError
from pxgen.core.models.unit import BinaryRef, CodegenUnit, Invocation
from pxgen.core.models.workspace import Package, PackageGraph

logger = logging.getLogger(__name__)


class GenerateConfig(BaseModel):
    """Code generation is performed by a binary defined in the workspace."""

    generator_type: Literal["cargo_workspace_binary"]
    generator_name: str
    generator_args: list[str] = Field(default_factory=list)


class VerifyConfig(BaseModel):
    """Freshness verification is performed by a binary defined in the workspace."""

    verifier_type: Literal["cargo_workspace_binary"]
    verifier_name: str
    verifier_args: list[str] = Field(default_factory=list)


class PxConfig(BaseModel):
    generate: GenerateConfig
    verify: VerifyConfig | None = None


class ManifestMetadata(BaseModel):
    """The ``[package.metadata]`` table; only the ``px`` key matters here."""

    px: PxConfig | None = None


def parse_px_config(package: Package) -> PxConfig | None:
    """Extract the px configuration of a package, if it has one.

    Raises:
        MalformedConfigError: If the metadata table doesn't match the schema.
    """
    if package.metadata is None:
        return None

    try:
        metadata = ManifestMetadata.model_validate(package.metadata)
    except ValidationError as e:
        raise MalformedConfigError(
            "Failed to deserialize `cargo px`'s codegen configuration "
            f"from the manifest of `{package.name}`",
            package_name=package.name,
        ) from e

    return metadata.px


def find_workspace_binary(
    binary_name: str,
    graph: PackageGraph,
    exclude_id: str,
) -> Package | None:
    """Find the workspace member (other than ``exclude_id``) defining a binary."""
    for member in graph.members():
        if member.id == exclude_id:
            continue
        if member.binary(binary_name) is not None:
            return member
    return None


def build_codegen_unit(
    config: PxConfig,
    package: Package,
    graph: PackageGraph,
) -> CodegenUnit:
    """Build a ``CodegenUnit`` for ``package`` from its px configuration.

    Raises:
        ConfigErrors: With one ``MissingBinaryError`` per binary that is
            not defined by another workspace member.
    """
    errors: list[Exception] = []

    generator: Invocation | None = None
    gen_config = config.generate
    owner = find_workspace_binary(gen_config.generator_name, graph, package.id)
    if owner is None:
        errors.append(MissingBinaryError(gen_config.generator_name, package.name, "generator"))
    else:
        generator = Invocation(
            binary=BinaryRef(
                name=gen_config.generator_name,
                package_id=owner.id,
                package_name=owner.name,
            ),
            args=gen_config.generator_args,
        )

    verifier: Invocation | None = None
    if config.verify is not None:
        ver_config = config.verify
        owner = find_workspace_binary(ver_config.verifier_name, graph, package.id)
        if owner is None:
            errors.append(MissingBinaryError(ver_config.verifier_name, package.name, "verifier"))
        else:
            verifier = Invocation(
                binary=BinaryRef(
                    name=ver_config.verifier_name,
                    package_id=owner.id,
                    package_name=owner.name,
                ),
                args=ver_config.verifier_args,
            )

    if errors:
        raise ConfigErrors(errors)
    assert generator is not None  # guaranteed when no errors

    return CodegenUnit(
        package_id=package.id,
        package_name=package.name,
        manifest_path=package.manifest_path,
        generator=generator,
        verifier=verifier,
    )


def extract_codegen_units(graph: PackageGraph) -> list[CodegenUnit]:
    """Retrieve every workspace member that requires code generation.

    Raises:
        ConfigErrors: Every configuration problem found, across all packages.
    """
    units: list[CodegenUnit] = []
    errors: list[Exception] = []

    for package in graph.members():
        try:
            config = parse_px_config(package)
        except MalformedConfigError as e:
            errors.append(e)
            continue

        if config is None:
            continue

        try:
            units.append(build_codegen_unit(config, package, graph))
        except ConfigErrors as e:
            errors.extend(e.errors)

    if errors:
        raise ConfigErrors(errors)

    logger.debug(
        "Determined the list of codegen units in the current workspace: %s",
        [unit.package_name for unit in units],
    )
    return units
