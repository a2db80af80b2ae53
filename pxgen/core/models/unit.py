"""
Codegen unit models — what gets generated, and by which binary.

A ``CodegenUnit`` says "package ``X`` needs its source regenerated by
running binary ``gen``, optionally re-verified by running ``check``".
Units are built once from manifest configuration plus workspace
metadata and never change afterwards.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BinaryRef(BaseModel):
    """A binary target defined by a workspace package."""

    model_config = ConfigDict(frozen=True)

    name: str                       # binary target name
    package_id: str                 # package that defines it
    package_name: str               # used for `cargo --package`


class ProcessCommand(BaseModel):
    """A fully-specified external process to spawn.

    ``id`` identifies the step (e.g. ``app:compile-generator``) in
    receipts and logs.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    argv: list[str]
    env: dict[str, str] = Field(default_factory=dict)
    cwd: str | None = None

    def with_env(self, **env: str) -> ProcessCommand:
        """Return a copy with extra environment variables set."""
        return self.model_copy(update={"env": {**self.env, **env}})


class Invocation(BaseModel):
    """A binary plus the extra arguments to forward to it."""

    model_config = ConfigDict(frozen=True)

    binary: BinaryRef
    args: list[str] = Field(default_factory=list)

    def build_command(self, cargo: str, quiet: bool = False, command_id: str = "") -> ProcessCommand:
        """The command that compiles the binary."""
        argv = [
            cargo,
            "build",
            "--package",
            self.binary.package_name,
            "--bin",
            self.binary.name,
        ]
        if quiet:
            argv.append("--quiet")
        return ProcessCommand(id=command_id or f"build:{self.binary.name}", argv=argv)

    def run_command(self, cargo: str, quiet: bool = False, command_id: str = "") -> ProcessCommand:
        """The command that runs the binary, forwarding ``args`` after ``--``."""
        argv = [
            cargo,
            "run",
            "--package",
            self.binary.package_name,
            "--bin",
            self.binary.name,
        ]
        if quiet:
            argv.append("--quiet")
        if self.args:
            argv.append("--")
            argv.extend(self.args)
        return ProcessCommand(id=command_id or f"run:{self.binary.name}", argv=argv)


class CodegenUnit(BaseModel):
    """A package whose source is produced by a generator binary."""

    model_config = ConfigDict(frozen=True)

    package_id: str
    package_name: str
    manifest_path: str
    generator: Invocation
    verifier: Invocation | None = None

    @property
    def generator_package_id(self) -> str:
        return self.generator.binary.package_id

    @property
    def verifier_package_id(self) -> str | None:
        return self.verifier.binary.package_id if self.verifier else None
