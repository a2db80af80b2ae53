"""
Helpers for generators and verifiers written in Python.

pxgen exports two variables to every binary it runs. A generator
reads them instead of relying on its own working directory:

    from pxgen.env import generated_pkg_manifest_path, workspace_root_dir

    manifest = generated_pkg_manifest_path()
    target_dir = manifest.parent / "src"
"""

from __future__ import annotations

import os
from pathlib import Path

# Path to the root directory of the current workspace.
WORKSPACE_ROOT_DIR_ENV = "CARGO_PX_WORKSPACE_ROOT_DIR"
# Path to the manifest of the package that must be generated.
GENERATED_PKG_MANIFEST_PATH_ENV = "CARGO_PX_GENERATED_PKG_MANIFEST_PATH"


class VarError(Exception):
    """An env variable set by pxgen could not be retrieved."""

    def __init__(self, message: str, name: str):
        super().__init__(message)
        self.name = name


class MissingVarError(VarError):
    """The variable is not set."""

    def __init__(self, name: str):
        super().__init__(
            f"The environment variable `{name}` is missing. "
            "Are you running the command through `cargo px`?",
            name,
        )


class InvalidUnicodeError(VarError):
    """The variable contains invalid Unicode data."""

    def __init__(self, name: str):
        super().__init__(
            f"The environment variable `{name}` contains invalid Unicode data.",
            name,
        )


def workspace_root_dir() -> Path:
    """Retrieve the path to the workspace root directory.

    Raises:
        VarError: If the variable is unset or not valid Unicode.
    """
    return Path(px_env_var(WORKSPACE_ROOT_DIR_ENV))


def generated_pkg_manifest_path() -> Path:
    """Retrieve the path to the manifest of the package being generated.

    Raises:
        VarError: If the variable is unset or not valid Unicode.
    """
    return Path(px_env_var(GENERATED_PKG_MANIFEST_PATH_ENV))


def px_env_var(name: str) -> str:
    value = os.environ.get(name)
    if value is None:
        raise MissingVarError(name)
    try:
        # Undecodable bytes survive as lone surrogates.
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidUnicodeError(name) from e
    return value
