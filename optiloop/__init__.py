# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
optiloop — iterative numerical optimization with observers and checkpointing.

    import torch
    from optiloop import Executor, SimulatedAnnealing
    from optiloop.problems import BoundedRandomWalk
    from optiloop.testfunctions import rosenbrock

    problem = BoundedRandomWalk(rosenbrock, -5.0, 5.0)
    result = (
        Executor(problem, SimulatedAnnealing(15.0))
        .configure(lambda s: s.set_param(torch.tensor([1.2, 1.2], dtype=torch.float64)).set_max_iters(1000))
        .run()
    )
"""

from optiloop.core import (
    CheckpointingFrequency,
    Executor,
    FileCheckpoint,
    IterState,
    OptimizationError,
    OptimizationResult,
    Problem,
    Solver,
    TerminationReason,
)
from optiloop.core.observers import LoggingObserver, Observe, ObserverMode, Observers, WriteToFile
from optiloop.solver import SATempFunc, SimulatedAnnealing

__version__ = "0.1.0"

__all__ = [
    "CheckpointingFrequency",
    "Executor",
    "FileCheckpoint",
    "IterState",
    "LoggingObserver",
    "Observe",
    "ObserverMode",
    "Observers",
    "OptimizationError",
    "OptimizationResult",
    "Problem",
    "SATempFunc",
    "SimulatedAnnealing",
    "Solver",
    "TerminationReason",
    "WriteToFile",
    "__version__",
]
