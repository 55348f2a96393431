# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Abstract base class every solver implements.

A solver is a small state machine driven by the executor:
  1. `init` runs once, before the first iteration
  2. `next_iter` runs once per iteration and returns the updated state
  3. `terminate` is asked before every iteration whether to stop

Solvers hold their own algorithm-specific variables (temperatures, stall
counters) as attributes. Everything the executor needs to know lives in
the IterState. Both get pickled together when checkpointing, so solver
attributes must be picklable.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from optiloop.core.kv import KV
from optiloop.core.problem import Problem
from optiloop.core.state import IterState
from optiloop.core.termination import TerminationReason

O = TypeVar("O")

SolverOutput = tuple[IterState[Any], Optional[KV]]


class Solver(ABC, Generic[O]):
    """Base class for all solvers. Subclasses must set NAME and implement next_iter."""

    NAME: str = "Solver"

    def init(self, problem: Problem[O], state: IterState[Any]) -> SolverOutput:
        """Called once before the first iteration. Default: nothing to set up."""
        return state, None

    @abstractmethod
    def next_iter(self, problem: Problem[O], state: IterState[Any]) -> SolverOutput:
        """Perform one iteration and return the updated state plus diagnostics."""
        ...

    def terminate(self, state: IterState[Any]) -> TerminationReason:
        """Solver-specific stopping criteria. Default: never stop on our own."""
        return TerminationReason.NOT_TERMINATED

    def terminate_internal(self, state: IterState[Any]) -> TerminationReason:
        """
        Combine the solver's own criteria with the generic ones.

        Order: solver-specific reason, then the iteration limit, then the
        target cost.
        """
        reason = self.terminate(state)
        if reason.terminated:
            return reason
        if state.iter >= state.max_iters:
            return TerminationReason.MAX_ITERS_REACHED
        if state.best_cost <= state.target_cost:
            return TerminationReason.TARGET_COST_REACHED
        return TerminationReason.NOT_TERMINATED
