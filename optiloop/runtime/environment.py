# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Interpreter and torch environment checks.

Runs once from bootstrap. The facts collected here go into the startup log
line so that a surprising result can be traced back to the torch build and
thread count that produced it.
"""

import platform
import sys
from typing import Any, NamedTuple

import torch

MINIMUM_PYTHON = (3, 11)


class SystemInfo(NamedTuple):
    """What a run was executed on."""

    python_version: str
    platform: str
    torch_version: str
    torch_threads: int
    deterministic_algorithms: bool

    def as_log_extra(self) -> dict[str, Any]:
        return self._asdict()


def get_python_version() -> tuple[int, int, int]:
    return sys.version_info[:3]


def check_minimum_python(version: tuple[int, ...] | None = None) -> None:
    """
    Fail early on an interpreter older than MINIMUM_PYTHON.

    Args:
        version: Version to check; the running interpreter's when None.

    Raises:
        RuntimeError: If the version is too old.
    """
    current = tuple(version) if version is not None else get_python_version()
    if current[:2] < MINIMUM_PYTHON:
        wanted = ".".join(str(part) for part in MINIMUM_PYTHON)
        found = ".".join(str(part) for part in current[:2])
        raise RuntimeError(f"optiloop requires Python >= {wanted}, found {found}")


def get_system_info() -> SystemInfo:
    return SystemInfo(
        python_version=platform.python_version(),
        platform=f"{platform.system()}-{platform.machine()}",
        torch_version=torch.__version__,
        torch_threads=torch.get_num_threads(),
        deterministic_algorithms=torch.are_deterministic_algorithms_enabled(),
    )
