"""
Console output — cargo-style status lines and error reports on stderr.

Status lines are right-aligned, bold green verbs followed by a
message, matching what cargo itself prints:

       Compiling `bp`, the code generator for `app`
       Generated `app` in 0.412s
"""

from __future__ import annotations

import textwrap

import click

from pxgen.core.engine.executor import StatusReporter
from pxgen.core.errors import ConfigErrors, error_chain


class ConsoleReporter(StatusReporter):
    """Writes status lines to stderr unless quiet."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def status(self, verb: str, message: str) -> None:
        super().status(verb, message)
        if self.quiet:
            return
        click.secho(f"{verb:>12}", fg="green", bold=True, nl=False, err=True)
        click.echo(f" {message}", err=True)

    def error(self, message: str) -> None:
        """Errors are printed even in quiet mode."""
        click.secho("error", fg="red", bold=True, nl=False, err=True)
        click.echo(f": {message}", err=True)

    def display_error(self, error: BaseException) -> None:
        """Print an error followed by its chain of causes."""
        if isinstance(error, ConfigErrors):
            for inner in error.errors:
                self.display_error(inner)
            return

        chain = list(error_chain(error))
        self.error(str(chain[0]))
        for cause in chain[1:]:
            click.echo("\n  Caused by:", err=True)
            click.echo(textwrap.indent(str(cause), "    "), err=True)
