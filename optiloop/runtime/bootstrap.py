# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for optiloop.

The one-time setup before any real work begins:
  1. Validate the environment (Python version)
  2. Set deterministic seeds
  3. Initialize the logger
  4. Ensure the project directories exist

After bootstrap completes two runs with the same config draw the same random
numbers, which is what makes a Simulated Annealing run reproducible.
"""

import os
import random
from pathlib import Path

import torch

from optiloop.config.schema import GlobalConfig
from optiloop.logging.logger import get_logger
from optiloop.runtime.environment import check_minimum_python, get_system_info
from optiloop.utils.paths import ensure_directory, resolve_project_root, resolve_under_root


def set_deterministic_seed(seed: int) -> None:
    """
    Lock down all sources of randomness to the given seed.

    This sets Python's random module seed, PYTHONHASHSEED and the torch CPU
    generator. Solvers that are not handed an explicit generator derive
    theirs from the torch default generator, so they follow this seed too.
    """
    random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)
    torch.manual_seed(seed)


def _ensure_project_directories(project_root: Path, config: GlobalConfig) -> None:
    dirs = config.directories
    ensure_directory(resolve_under_root(dirs.checkpoints, project_root))
    ensure_directory(resolve_under_root(dirs.logs, project_root))
    ensure_directory(resolve_under_root(dirs.output, project_root))


def bootstrap(config: GlobalConfig, project_root: Path | None = None) -> Path:
    """
    Run the full bootstrap sequence.

    Args:
        config: The validated global configuration.
        project_root: Root for relative paths; resolved from cwd when None.

    Returns:
        The project root the run is anchored at.
    """
    check_minimum_python()
    set_deterministic_seed(config.seed)

    root = project_root if project_root is not None else resolve_project_root()

    log_file = None
    if config.log_file is not None:
        log_file = resolve_under_root(config.log_file, root)

    logger = get_logger("optiloop.runtime", log_level=config.log_level, log_file=log_file)

    _ensure_project_directories(root, config)

    system_info = get_system_info()
    logger.info(
        "optiloop bootstrap complete",
        extra={"seed": config.seed, "project_root": str(root), **system_info.as_log_extra()},
    )
    return root
