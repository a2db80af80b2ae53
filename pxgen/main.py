"""
pxgen — ``cargo px`` entrypoint.

A forwarding proxy in front of cargo. Installed as ``cargo-px`` so that
cargo picks it up as a sub-command:

    cargo px build -p app        # generate, then `cargo build -p app`
    cargo px test                # generate for the package in cwd, then test
    cargo px verify-freshness    # verify generated code, no delegation
    cargo px fmt                 # forwarded to cargo untouched
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import click

from pxgen.adapters.base import ProcessRunner
from pxgen.core.config.loader import ConfigError, PxSettings, load_settings
from pxgen.core.errors import CommandError, EnvironmentUnavailableError, PxError
from pxgen.core.models.unit import ProcessCommand
from pxgen.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    LOG_LEVEL_ENV,
    setup_logging,
)
from pxgen.ui.console import ConsoleReporter

logger = logging.getLogger(__name__)

# Commands whose outcome might be affected by code generation.
CODEGEN_COMMANDS = frozenset(
    ["build", "b", "test", "t", "check", "c", "run", "r", "doc", "d", "bench", "publish"]
)
VERIFY_COMMAND = "verify-freshness"

# Set by cargo when it invokes a custom sub-command.
CARGO_ENV = "CARGO"


def _is_quiet(args: list[str]) -> bool:
    """Whether ``--quiet``/``-q`` was passed to cargo (not to the binary after ``--``)."""
    for arg in args:
        if arg == "--":
            return False
        if arg in ("--quiet", "-q"):
            return True
    return False


def _cargo_path(settings: PxSettings) -> str:
    cargo = os.environ.get(CARGO_ENV) or settings.build_tool
    if not cargo:
        raise EnvironmentUnavailableError(
            CARGO_ENV,
            "It is set by `cargo` when invoking a custom sub-command, allowing "
            "`cargo-px` to detect which toolchain should be used. Run it as "
            "`cargo px <command>`, or set `build_tool` in px.yml.",
        )
    return cargo


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
        "help_option_names": [],
    }
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def cli(args: tuple[str, ...]) -> None:
    """Generate code before delegating to cargo."""
    forwarded = list(args)
    # cargo invokes us as `cargo-px px <command> ...`
    if forwarded and forwarded[0] == "px":
        forwarded = forwarded[1:]

    quiet = _is_quiet(forwarded)
    reporter = ConsoleReporter(quiet=quiet)
    working_directory = Path.cwd()

    try:
        settings = load_settings(start_dir=working_directory)
    except ConfigError as e:
        reporter.display_error(e)
        sys.exit(1)

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=os.environ.get(LOG_LEVEL_ENV) or settings.log_level or "WARNING",
        log_file=os.environ.get(LOG_FILE_ENV) or settings.log_file,
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )
    reporter.quiet = quiet or settings.quiet

    try:
        cargo = _cargo_path(settings)
    except EnvironmentUnavailableError as e:
        reporter.display_error(e)
        sys.exit(1)

    from pxgen.adapters.cargo.metadata import CargoMetadataProvider
    from pxgen.adapters.shell.process import SubprocessRunner

    provider = CargoMetadataProvider(cargo)
    runner = SubprocessRunner()
    command = forwarded[0] if forwarded else None

    if command == VERIFY_COMMAND:
        from pxgen.core.use_cases.codegen import run_verify

        result = run_verify(
            cargo,
            working_directory,
            forwarded[1:],
            provider=provider,
            runner=runner,
            quiet=quiet,
            reporter=reporter,
        )
        if not result.ok:
            for error in result.errors:
                reporter.display_error(error)
            reporter.error("Something went wrong during verification")
            sys.exit(1)
        return

    if command in CODEGEN_COMMANDS:
        from pxgen.core.use_cases.codegen import run_codegen

        result = run_codegen(
            cargo,
            working_directory,
            forwarded[1:],
            provider=provider,
            runner=runner,
            quiet=quiet,
            reporter=reporter,
        )
        if not result.ok:
            for error in result.errors:
                reporter.display_error(error)
            reporter.error("Something went wrong during code generation")
            sys.exit(1)

    sys.exit(_delegate(cargo, forwarded, runner, reporter))


def _delegate(cargo: str, args: list[str], runner: ProcessRunner, reporter: ConsoleReporter) -> int:
    """Run ``cargo <args>`` and return the exit code to propagate."""
    receipt = runner.run(ProcessCommand(id="cargo", argv=[cargo, *args]))
    if receipt.ok:
        return 0

    if receipt.return_code is None:
        error = PxError("Failed to execute `cargo` command")
        error.__cause__ = CommandError(receipt.error or "unknown error")
        reporter.display_error(error)
        return 1
    # Negative when killed by a signal.
    return receipt.return_code if receipt.return_code > 0 else 1


if __name__ == "__main__":
    cli()
