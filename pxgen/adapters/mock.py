"""
Mock adapters — in-memory test doubles for the pipeline collaborators.

``MockRunner`` records every command instead of spawning it and can be
told to fail specific command ids. ``StaticMetadataProvider`` hands back
a fixed ``PackageGraph``.
"""

from __future__ import annotations

from pathlib import Path

from pxgen.adapters.base import MetadataProvider, ProcessRunner
from pxgen.core.errors import MetadataError
from pxgen.core.models.receipt import Receipt
from pxgen.core.models.unit import ProcessCommand
from pxgen.core.models.workspace import PackageGraph


class MockRunner(ProcessRunner):
    """Universal mock runner for testing.

    By default, every command succeeds. Can be configured with
    custom receipts per command id.
    """

    def __init__(self, runner_name: str = "mock", available: bool = True):
        self._name = runner_name
        self._available = available
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ProcessCommand] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ProcessCommand]:
        """All commands this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def called_ids(self) -> list[str]:
        return [command.id for command in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, command_id: str, receipt: Receipt) -> None:
        """Set a custom response for a specific command id."""
        self._responses[command_id] = receipt

    def set_failure(
        self,
        command_id: str,
        error: str = "Mock failure",
        return_code: int | None = 1,
    ) -> None:
        """Configure a specific command to fail."""
        self._responses[command_id] = Receipt.failure(
            runner=self._name,
            command_id=command_id,
            error=error,
            return_code=return_code,
        )

    def run(self, command: ProcessCommand) -> Receipt:
        self._call_log.append(command)

        if command.id in self._responses:
            return self._responses[command.id]

        return Receipt.success(
            runner=self._name,
            command_id=command.id,
            argv=command.argv,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()


class StaticMetadataProvider(MetadataProvider):
    """Returns a pre-built package graph (or raises a pre-set error)."""

    def __init__(self, graph: PackageGraph | None = None, error: str | None = None):
        self._graph = graph
        self._error = error
        self.fetch_count = 0

    @property
    def name(self) -> str:
        return "static"

    def is_available(self) -> bool:
        return self._graph is not None

    def fetch(self, working_directory: Path) -> PackageGraph:
        self.fetch_count += 1
        if self._error is not None or self._graph is None:
            raise MetadataError(self._error or "No package graph configured")
        return self._graph
