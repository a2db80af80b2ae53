"""
Settings loader — reads the optional ``px.yml`` into ``PxSettings``.

pxgen works without any settings file. When one exists (at the
workspace root or any directory above the working directory) it can
pin the build tool and default logging:

    build_tool: /opt/rust/bin/cargo   # used when $CARGO is not set
    log_level: INFO
    log_file: .px/pxgen.log
    quiet: false
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from pxgen.core.errors import ConfigError

logger = logging.getLogger(__name__)

# Default settings filename
SETTINGS_FILE = "px.yml"

__all__ = ["ConfigError", "PxSettings", "SETTINGS_FILE", "find_settings_file", "load_settings"]


class PxSettings(BaseModel):
    """User-level defaults for the pipeline."""

    build_tool: str | None = None
    log_level: str | None = None
    log_file: str | None = None
    quiet: bool = False


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Search for px.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to px.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SETTINGS_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None, start_dir: Path | None = None) -> PxSettings:
    """Load and validate settings.

    Args:
        path: Explicit path to px.yml. If None, searches upward from ``start_dir``.
        start_dir: Where the upward search begins (default: cwd).

    Returns:
        Validated settings; defaults when no file exists.

    Raises:
        ConfigError: If the file is unreadable or invalid.
    """
    if path is None:
        path = find_settings_file(start_dir)
        if path is None:
            return PxSettings()
    elif not path.is_file():
        raise ConfigError(f"Settings file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return PxSettings()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        return PxSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e
