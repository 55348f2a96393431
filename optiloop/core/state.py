# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Iteration state carried from one solver iteration to the next.

The executor owns the state between iterations; a solver receives it in
`next_iter`, fills in the new parameter vector and cost, and hands it back.
Best-so-far bookkeeping happens in `update`, which the executor calls after
every iteration. Solvers don't track the best solution themselves.

Setters return the state so solvers can write
`state.set_param(p).set_cost(c)`.
"""

import math
import sys
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from optiloop.core.problem import Problem
from optiloop.core.termination import TerminationReason

P = TypeVar("P")


@dataclass
class IterState(Generic[P]):
    """
    Parameter vectors, costs and counters of an optimization run.

    Costs start at +inf so the first evaluated cost always becomes the best.
    `target_cost` starts at -inf, so it never fires unless configured.
    """

    param: Optional[P] = None
    prev_param: Optional[P] = None
    best_param: Optional[P] = None
    prev_best_param: Optional[P] = None
    cost: float = math.inf
    prev_cost: float = math.inf
    best_cost: float = math.inf
    prev_best_cost: float = math.inf
    target_cost: float = -math.inf
    iter: int = 0
    last_best_iter: int = 0
    max_iters: int = sys.maxsize
    counts: dict[str, int] = field(default_factory=dict)
    time: Optional[float] = None
    termination_reason: TerminationReason = TerminationReason.NOT_TERMINATED

    def set_param(self, param: P) -> "IterState[P]":
        """Set the current parameter vector; the old one moves to `prev_param`."""
        self.prev_param = self.param
        self.param = param
        return self

    def set_cost(self, cost: float) -> "IterState[P]":
        """Set the current cost; the old one moves to `prev_cost`."""
        self.prev_cost = self.cost
        self.cost = float(cost)
        return self

    def set_max_iters(self, max_iters: int) -> "IterState[P]":
        self.max_iters = max_iters
        return self

    def set_target_cost(self, target_cost: float) -> "IterState[P]":
        self.target_cost = float(target_cost)
        return self

    def take_param(self) -> Optional[P]:
        """Remove and return the current parameter vector."""
        param, self.param = self.param, None
        return param

    def update(self) -> None:
        """
        Promote the current param/cost to best if it improves on the best so far.

        When nothing finite was ever evaluated (both costs +inf) the first
        parameter vector still becomes the best, so `best_param` is never
        left empty once a param exists.
        """
        improved = self.cost < self.best_cost
        first_infinite = (
            math.isinf(self.best_cost)
            and self.best_cost > 0
            and math.isinf(self.cost)
            and self.cost > 0
            and self.best_param is None
            and self.param is not None
        )
        if improved or first_infinite:
            self.prev_best_param = self.best_param
            self.prev_best_cost = self.best_cost
            self.best_param = self.param
            self.best_cost = self.cost
            self.last_best_iter = self.iter

    def is_best(self) -> bool:
        """True if the current iteration produced a new best."""
        return self.last_best_iter == self.iter

    def increment_iter(self) -> None:
        self.iter += 1

    def func_counts(self, problem: Problem[Any]) -> None:
        """
        Move the evaluation counts accumulated in `problem` into the state.

        Counts are consumed, not copied: the problem's counters are reset
        afterwards. That keeps the totals right after resuming from a
        checkpoint, where the state carries the history but the problem
        starts from zero.
        """
        for name, value in problem.counts.items():
            self.counts[name] = self.counts.get(name, 0) + value
        problem.counts.clear()

    def terminate_with(self, reason: TerminationReason) -> "IterState[P]":
        self.termination_reason = reason
        return self

    def terminated(self) -> bool:
        return self.termination_reason.terminated
