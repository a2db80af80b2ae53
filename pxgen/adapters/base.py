"""
Adapter base — the narrow contracts between the pipeline and the outside.

The core only talks to two collaborators:

- a ``MetadataProvider`` that returns the workspace package graph;
- a ``ProcessRunner`` that spawns a command and waits for it.

Both are small ABCs so the scheduler and executor can be driven by
in-memory fakes in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pxgen.core.models.receipt import Receipt
from pxgen.core.models.unit import ProcessCommand
from pxgen.core.models.workspace import PackageGraph


class ProcessRunner(ABC):
    """Spawns an external process and blocks until it exits.

    Runners NEVER raise: spawn errors and non-zero exits are both
    reported through the returned Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'subprocess', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether this runner can spawn processes here. Fast, never raises."""

    @abstractmethod
    def run(self, command: ProcessCommand) -> Receipt:
        """Run the command to completion and return a receipt."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class MetadataProvider(ABC):
    """Returns the package graph of the workspace around a directory."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The provider identifier (e.g., 'cargo', 'static')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool can be invoked. Fast, never raises."""

    @abstractmethod
    def fetch(self, working_directory: Path) -> PackageGraph:
        """Retrieve the package graph.

        Raises:
            MetadataError: If the graph cannot be retrieved or parsed.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
