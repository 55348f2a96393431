# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Final result of an optimization run."""

from dataclasses import dataclass
from typing import Any

from optiloop.core.observers.file import param_to_jsonable
from optiloop.core.problem import Problem
from optiloop.core.solver import Solver
from optiloop.core.state import IterState


@dataclass
class OptimizationResult:
    """The problem (with its counters), the solver and the final state."""

    problem: Problem[Any]
    solver: Solver[Any]
    state: IterState[Any]

    def summary(self) -> dict[str, object]:
        """Flat dict of the headline numbers, ready for `extra=` or JSON."""
        return {
            "solver": self.solver.NAME,
            "best_param": param_to_jsonable(self.state.best_param),
            "best_cost": self.state.best_cost,
            "best_iter": self.state.last_best_iter,
            "iters": self.state.iter,
            "termination": self.state.termination_reason.value,
            "counts": dict(self.state.counts),
            "time": self.state.time,
        }

    def __str__(self) -> str:
        state = self.state
        time = f"{state.time:.6f}s" if state.time is not None else "n/a"
        lines = [
            "OptimizationResult:",
            f"    Solver:        {self.solver.NAME}",
            f"    param (best):  {param_to_jsonable(state.best_param)}",
            f"    cost (best):   {state.best_cost}",
            f"    iters (best):  {state.last_best_iter}",
            f"    iters (total): {state.iter}",
            f"    termination:   {state.termination_reason.text}",
            f"    time:          {time}",
        ]
        return "\n".join(lines)
