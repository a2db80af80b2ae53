"""Adapters — bindings to cargo and the operating system.

Public re-exports for convenient access.
"""

from pxgen.adapters.base import MetadataProvider, ProcessRunner
from pxgen.adapters.cargo.metadata import CargoMetadataProvider
from pxgen.adapters.mock import MockRunner, StaticMetadataProvider
from pxgen.adapters.shell.process import SubprocessRunner

__all__ = [
    "CargoMetadataProvider",
    "MetadataProvider",
    "MockRunner",
    "ProcessRunner",
    "StaticMetadataProvider",
    "SubprocessRunner",
]
