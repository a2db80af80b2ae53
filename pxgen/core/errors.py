"""
Error types — everything the pipeline can report to the user.

Configuration problems (bad manifests, missing binaries, cycles) are
collected and raised together as ``ConfigErrors`` so a user sees every
misconfigured package in one pass. Execution problems are fail-fast:
the first ``ProcessFailure`` aborts the plan.

Underlying causes are chained with ``raise ... from ...``;
``error_chain`` walks that chain for display.
"""

from __future__ import annotations

from collections.abc import Iterator


class PxError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(PxError):
    """Raised when pxgen's own settings file is invalid."""


class MalformedConfigError(PxError):
    """A package's ``[package.metadata.px]`` table cannot be parsed."""

    def __init__(self, message: str, package_name: str = ""):
        super().__init__(message)
        self.package_name = package_name


class MissingBinaryError(PxError):
    """A generator or verifier binary is not defined in the workspace."""

    def __init__(self, binary_name: str, package_name: str, role: str = "generator"):
        super().__init__(
            f"There is no binary named `{binary_name}` in the workspace, "
            f"but it's listed as the {role} name for package `{package_name}`"
        )
        self.binary_name = binary_name
        self.package_name = package_name
        self.role = role


class CyclicDependencyError(PxError):
    """The augmented dependency graph contains a cycle."""

    def __init__(self, message: str, cycle: list[str]):
        super().__init__(message)
        self.cycle = cycle


class CommandError(PxError):
    """What the process runner reported for a failed command."""


class ProcessFailure(PxError):
    """A compile or run step exited non-zero or could not be spawned."""

    def __init__(self, message: str, command_id: str = "", return_code: int | None = None):
        super().__init__(message)
        self.command_id = command_id
        self.return_code = return_code


class MissingVerifierError(PxError):
    """Freshness verification was requested for a unit without a verifier."""

    def __init__(self, package_name: str):
        super().__init__(
            f"`{package_name}` doesn't define a verifier, "
            "therefore we can't verify if it's fresh"
        )
        self.package_name = package_name


class EnvironmentUnavailableError(PxError):
    """A variable pxgen itself depends on is not set."""

    def __init__(self, name: str, hint: str = ""):
        message = f"The `{name}` environment variable was not set."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)
        self.name = name


class MetadataError(PxError):
    """The workspace package graph could not be retrieved."""


class ConfigErrors(PxError):
    """Several independent errors, reported together."""

    def __init__(self, errors: list[Exception]):
        self.errors = list(errors)
        super().__init__(
            f"{len(self.errors)} error(s): "
            + "; ".join(str(e).splitlines()[0] for e in self.errors if str(e))
        )

    def __iter__(self) -> Iterator[Exception]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)


def error_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield ``error`` followed by each of its causes."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or (
            None if current.__suppress_context__ else current.__context__
        )
