# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
optiloop core: everything a solver needs to run.

Subsystems:
  - problem: CostFunction/Anneal interfaces and the counting Problem wrapper
  - state: IterState, the per-iteration state
  - solver: the Solver base class
  - executor: the run loop
  - observers: progress logging and parameter dumps
  - checkpoint: atomic solver/state snapshots
"""

from optiloop.core.checkpoint import CheckpointingFrequency, FileCheckpoint
from optiloop.core.errors import (
    CheckpointCorruptError,
    CheckpointNotFoundError,
    ConditionViolatedError,
    InvalidParameterError,
    NotImplementedInSolverError,
    NotInitializedError,
    OptimizationError,
    PotentialBugError,
)
from optiloop.core.executor import Executor
from optiloop.core.kv import KV, make_kv
from optiloop.core.problem import Anneal, CostFunction, Problem
from optiloop.core.result import OptimizationResult
from optiloop.core.solver import Solver
from optiloop.core.state import IterState
from optiloop.core.termination import TerminationReason

__all__ = [
    "Anneal",
    "CheckpointCorruptError",
    "CheckpointNotFoundError",
    "CheckpointingFrequency",
    "ConditionViolatedError",
    "CostFunction",
    "Executor",
    "FileCheckpoint",
    "InvalidParameterError",
    "IterState",
    "KV",
    "NotImplementedInSolverError",
    "NotInitializedError",
    "OptimizationError",
    "OptimizationResult",
    "PotentialBugError",
    "Problem",
    "Solver",
    "TerminationReason",
    "make_kv",
]
