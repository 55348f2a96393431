# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for IterState and TerminationReason.

The best-so-far bookkeeping is what every observer and result depends on,
so `update` gets the most attention here.
"""

import math
import sys

from optiloop.core.problem import Problem
from optiloop.core.state import IterState
from optiloop.core.termination import TerminationReason


class _Quadratic:
    def cost(self, x: float) -> float:
        return x * x

    def anneal(self, x: float, extent: float) -> float:
        return x + extent


class TestDefaults:
    def test_fresh_state(self) -> None:
        state: IterState[float] = IterState()
        assert state.param is None
        assert state.best_param is None
        assert state.cost == math.inf
        assert state.best_cost == math.inf
        assert state.target_cost == -math.inf
        assert state.max_iters == sys.maxsize
        assert state.iter == 0
        assert state.counts == {}
        assert state.time is None
        assert state.termination_reason is TerminationReason.NOT_TERMINATED
        assert not state.terminated()


class TestSetters:
    def test_setters_chain_and_keep_previous(self) -> None:
        state: IterState[float] = IterState()
        state.set_param(1.0).set_cost(4.0)
        state.set_param(2.0).set_cost(3.0)

        assert state.param == 2.0
        assert state.prev_param == 1.0
        assert state.cost == 3.0
        assert state.prev_cost == 4.0

    def test_take_param_leaves_none(self) -> None:
        state: IterState[float] = IterState().set_param(5.0)
        assert state.take_param() == 5.0
        assert state.param is None

    def test_limits(self) -> None:
        state: IterState[float] = IterState().set_max_iters(10).set_target_cost(0.5)
        assert state.max_iters == 10
        assert state.target_cost == 0.5


class TestUpdate:
    def test_improvement_becomes_best(self) -> None:
        state: IterState[float] = IterState().set_param(3.0).set_cost(9.0)
        state.update()
        assert state.best_param == 3.0
        assert state.best_cost == 9.0
        assert state.is_best()

        state.increment_iter()
        state.set_param(1.0).set_cost(1.0)
        state.update()

        assert state.best_param == 1.0
        assert state.best_cost == 1.0
        assert state.prev_best_param == 3.0
        assert state.prev_best_cost == 9.0
        assert state.last_best_iter == 1

    def test_worse_cost_keeps_best(self) -> None:
        state: IterState[float] = IterState().set_param(1.0).set_cost(1.0)
        state.update()
        state.increment_iter()
        state.set_param(5.0).set_cost(25.0)
        state.update()

        assert state.best_param == 1.0
        assert state.last_best_iter == 0
        assert not state.is_best()

    def test_equal_cost_is_not_an_improvement(self) -> None:
        state: IterState[float] = IterState().set_param(1.0).set_cost(1.0)
        state.update()
        state.increment_iter()
        state.set_param(-1.0).set_cost(1.0)
        state.update()

        assert state.best_param == 1.0
        assert state.last_best_iter == 0

    def test_infinite_first_cost_still_sets_best_param(self) -> None:
        state: IterState[float] = IterState().set_param(7.0)
        state.update()

        assert state.best_param == 7.0
        assert state.best_cost == math.inf

    def test_infinite_cost_does_not_replace_existing_best(self) -> None:
        state: IterState[float] = IterState().set_param(7.0)
        state.update()
        state.increment_iter()
        state.set_param(8.0)
        state.update()

        assert state.best_param == 7.0
        assert state.last_best_iter == 0

    def test_no_param_no_best(self) -> None:
        state: IterState[float] = IterState()
        state.update()
        assert state.best_param is None


class TestFuncCounts:
    def test_counts_are_moved_from_problem(self) -> None:
        problem = Problem(_Quadratic())
        problem.cost(1.0)
        problem.cost(2.0)
        problem.anneal(1.0, 0.5)

        state: IterState[float] = IterState()
        state.func_counts(problem)

        assert state.counts == {"cost_count": 2, "anneal_count": 1}
        assert problem.counts == {}

    def test_counts_accumulate(self) -> None:
        problem = Problem(_Quadratic())
        state: IterState[float] = IterState(counts={"cost_count": 10})
        problem.cost(1.0)
        state.func_counts(problem)

        assert state.counts["cost_count"] == 11


class TestTerminationReason:
    def test_only_not_terminated_is_not_terminated(self) -> None:
        for reason in TerminationReason:
            assert reason.terminated is (reason is not TerminationReason.NOT_TERMINATED)

    def test_text(self) -> None:
        assert TerminationReason.MAX_ITERS_REACHED.text == "Maximum number of iterations reached"
        assert TerminationReason.TARGET_COST_REACHED.text == "Target cost value reached"
        assert str(TerminationReason.KEYBOARD_INTERRUPT) == "Keyboard interrupt"
        assert str(TerminationReason.ABORTED) == "Optimization aborted"

    def test_every_reason_has_text(self) -> None:
        assert all(reason.text for reason in TerminationReason)

    def test_terminate_with(self) -> None:
        state: IterState[float] = IterState().terminate_with(TerminationReason.SOLVER_CONVERGED)
        assert state.terminated()
        assert state.termination_reason is TerminationReason.SOLVER_CONVERGED
