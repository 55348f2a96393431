# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for optiloop.

Config paths are relative to the project root. The root is found by walking
up from the current working directory until a pyproject.toml shows up; when
none is found (an installed package run from an arbitrary directory) the
working directory itself is the root.
"""

from pathlib import Path
from typing import Optional


def resolve_project_root(start: Optional[Path] = None) -> Path:
    """
    Walk up from `start` (default: cwd) to the nearest directory holding a
    pyproject.toml.

    Returns:
        Absolute path to the project root, or the resolved start directory
        if no ancestor has a pyproject.toml.
    """
    origin = (start or Path.cwd()).resolve()
    current = origin
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    return origin


def ensure_directory(path: Path) -> Path:
    """Create a directory (and parents) if it doesn't exist. Returns the path for chaining."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_under_root(path: str | Path, project_root: Path) -> Path:
    """Absolute paths are returned unchanged, relative ones are anchored at the project root."""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return project_root / candidate
