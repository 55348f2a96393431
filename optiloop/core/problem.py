# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
User problem interfaces and the counting wrapper around them.

A user problem is any object with the methods a solver needs. Simulated
Annealing, for instance, needs `cost` and `anneal`. The protocols below only
describe those shapes; nothing has to subclass them.

Solvers never call the user object directly. They go through `Problem`,
which counts every evaluation so the final state can report how many cost
function calls a run took.
"""

from typing import Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

from optiloop.core.errors import NotImplementedInSolverError

P = TypeVar("P")
O = TypeVar("O")
R = TypeVar("R")


@runtime_checkable
class CostFunction(Protocol[P]):
    """Anything that maps a parameter vector to a scalar cost."""

    def cost(self, param: P) -> float: ...


@runtime_checkable
class Anneal(Protocol[P]):
    """Anything that can propose a new parameter vector from an old one."""

    def anneal(self, param: P, extent: float) -> P: ...


class Problem(Generic[O]):
    """
    Wraps a user problem and counts how often each operation is evaluated.

    `counts` maps counter names ("cost_count", "anneal_count", ...) to the
    number of calls made so far.
    """

    def __init__(self, problem: O) -> None:
        self.problem_obj = problem
        self.counts: dict[str, int] = {}

    def problem(self, counter: str, fn: Callable[[O], R]) -> R:
        """Apply `fn` to the wrapped object and bump `counter`."""
        self.counts[counter] = self.counts.get(counter, 0) + 1
        return fn(self.problem_obj)

    def _require(self, method: str) -> Any:
        bound = getattr(self.problem_obj, method, None)
        if not callable(bound):
            raise NotImplementedInSolverError(
                f"Problem {type(self.problem_obj).__name__} does not implement `{method}`"
            )
        return bound

    def cost(self, param: Any) -> float:
        """Evaluate the cost function and count the call."""
        self._require("cost")
        return self.problem("cost_count", lambda p: p.cost(param))

    def anneal(self, param: Any, extent: float) -> Any:
        """Anneal `param` with the given extent (temperature) and count the call."""
        self._require("anneal")
        return self.problem("anneal_count", lambda p: p.anneal(param, extent))

    def __repr__(self) -> str:
        return f"Problem({self.problem_obj!r}, counts={self.counts})"
