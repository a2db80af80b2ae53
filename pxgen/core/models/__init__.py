"""
Domain models — Pydantic types for the codegen pipeline.

All models are re-exported here for convenient access:

    from pxgen.core.models import PackageGraph, CodegenUnit, Receipt
"""

from pxgen.core.models.receipt import Receipt
from pxgen.core.models.unit import BinaryRef, CodegenUnit, Invocation, ProcessCommand
from pxgen.core.models.workspace import (
    BuildTarget,
    Dependency,
    DependsCache,
    Package,
    PackageGraph,
)

__all__ = [
    # unit.py
    "BinaryRef",
    # workspace.py
    "BuildTarget",
    "CodegenUnit",
    "Dependency",
    "DependsCache",
    "Invocation",
    "Package",
    "PackageGraph",
    "ProcessCommand",
    # receipt.py
    "Receipt",
]
