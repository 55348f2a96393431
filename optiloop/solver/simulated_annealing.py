# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Simulated Annealing.

Each iteration proposes a new parameter vector by annealing the current one
with the current temperature as extent. Improvements are always accepted;
a worse candidate is accepted with probability

    1 / (1 + exp((new_cost - prev_cost) / temperature))

which lies between 0 and 0.5. The temperature follows a cooling schedule
(SATempFunc) and can be reset to the initial temperature (reannealing) after
a fixed number of iterations, or after too many iterations without an
accepted or a new best solution.

References:
  [0] https://en.wikipedia.org/wiki/Simulated_annealing
  [1] S Kirkpatrick, CD Gelatt Jr, MP Vecchi. (1983). "Optimization by
      Simulated Annealing". Science 13 May 1983, Vol. 220, Issue 4598,
      pp. 671-680. DOI: 10.1126/science.220.4598.671
"""

import math
import sys
from enum import Enum
from typing import Any, Optional

import torch

from optiloop.core.errors import InvalidParameterError, NotInitializedError
from optiloop.core.kv import make_kv
from optiloop.core.problem import Problem
from optiloop.core.solver import Solver, SolverOutput
from optiloop.core.state import IterState
from optiloop.core.termination import TerminationReason

# "No limit" for stall and reanneal counters.
UNBOUNDED = sys.maxsize


class SATempFunc(Enum):
    """
    Cooling schedules. With initial temperature t_init and iteration i:

      TEMPERATURE_FAST: t_i = t_init / i
      BOLTZMANN:        t_i = t_init / ln(i)
      EXPONENTIAL:      t_i = t_init * x^i   (0 < x < 1)
    """

    TEMPERATURE_FAST = "temperature_fast"
    BOLTZMANN = "boltzmann"
    EXPONENTIAL = "exponential"

    @classmethod
    def default(cls) -> "SATempFunc":
        return cls.BOLTZMANN


def acceptance_probability(delta: float, temperature: float) -> float:
    """
    1 / (1 + exp(delta / temperature)), without overflowing for large delta.

    A long exponential schedule underflows to zero temperature, where no
    worse or equal candidate is accepted.
    """
    if temperature <= 0.0:
        return 0.0
    exponent = delta / temperature
    if exponent > 700.0:
        return 0.0
    return 1.0 / (1.0 + math.exp(exponent))


class SimulatedAnnealing(Solver[Any]):
    """
    Simulated Annealing solver.

    The problem must provide `cost(param)` and `anneal(param, extent)`.

    Args:
        init_temp: Initial temperature, must be > 0.
        rng: Generator for the acceptance draws. Defaults to a fresh generator
             seeded from torch's global generator, so it follows
             `torch.manual_seed`.

    Raises:
        InvalidParameterError: If init_temp <= 0.
    """

    NAME = "Simulated Annealing"

    def __init__(self, init_temp: float, rng: Optional[torch.Generator] = None) -> None:
        if not init_temp > 0.0:
            raise InvalidParameterError("Initial temperature must be > 0.")

        if rng is None:
            rng = torch.Generator()
            rng.manual_seed(int(torch.randint(0, 2**62, (1,)).item()))

        self.init_temp = float(init_temp)
        self.temp_func = SATempFunc.TEMPERATURE_FAST
        self.exponential_factor = 0.95
        # Iterations used for the temperature; reset by reannealing.
        self.temp_iter = 0
        self.stall_iter_accepted = 0
        self.stall_iter_accepted_limit = UNBOUNDED
        self.stall_iter_best = 0
        self.stall_iter_best_limit = UNBOUNDED
        self.reanneal_fixed = UNBOUNDED
        self.reanneal_iter_fixed = 0
        self.reanneal_accepted = UNBOUNDED
        self.reanneal_iter_accepted = 0
        self.reanneal_best = UNBOUNDED
        self.reanneal_iter_best = 0
        self.cur_temp = self.init_temp
        self.rng = rng

    # ── Builder ────────────────────────────────────────────────────────────

    def with_temp_func(self, temp_func: SATempFunc, factor: Optional[float] = None) -> "SimulatedAnnealing":
        """Set the cooling schedule. `factor` is x of the exponential schedule."""
        if temp_func is SATempFunc.EXPONENTIAL:
            x = self.exponential_factor if factor is None else float(factor)
            if not 0.0 < x < 1.0:
                raise InvalidParameterError("Exponential temperature factor must be in (0, 1).")
            self.exponential_factor = x
        self.temp_func = temp_func
        return self

    def with_stall_accepted(self, iters: int) -> "SimulatedAnnealing":
        """Stop after `iters` iterations without an accepted solution."""
        self.stall_iter_accepted_limit = iters
        return self

    def with_stall_best(self, iters: int) -> "SimulatedAnnealing":
        """Stop after `iters` iterations without a new best solution."""
        self.stall_iter_best_limit = iters
        return self

    def with_reannealing_fixed(self, iters: int) -> "SimulatedAnnealing":
        """Reanneal every `iters` iterations."""
        self.reanneal_fixed = iters
        return self

    def with_reannealing_accepted(self, iters: int) -> "SimulatedAnnealing":
        """Reanneal after `iters` iterations without an accepted solution."""
        self.reanneal_accepted = iters
        return self

    def with_reannealing_best(self, iters: int) -> "SimulatedAnnealing":
        """Reanneal after `iters` iterations without a new best solution."""
        self.reanneal_best = iters
        return self

    # ── Internals ──────────────────────────────────────────────────────────

    def update_temperature(self) -> None:
        """Set `cur_temp` from the schedule and `temp_iter`."""
        i = self.temp_iter + 1
        if self.temp_func is SATempFunc.TEMPERATURE_FAST:
            self.cur_temp = self.init_temp / i
        elif self.temp_func is SATempFunc.BOLTZMANN:
            self.cur_temp = self.init_temp / math.log(i) if i > 1 else math.inf
        else:
            self.cur_temp = self.init_temp * self.exponential_factor**i

    def reanneal(self) -> tuple[bool, bool, bool]:
        """Reset temperature and counters if any reannealing criterion is met."""
        out = (
            self.reanneal_iter_fixed >= self.reanneal_fixed,
            self.reanneal_iter_accepted >= self.reanneal_accepted,
            self.reanneal_iter_best >= self.reanneal_best,
        )
        if any(out):
            self.reanneal_iter_fixed = 0
            self.reanneal_iter_accepted = 0
            self.reanneal_iter_best = 0
            self.cur_temp = self.init_temp
            self.temp_iter = 0
        return out

    def update_stall_and_reanneal_iter(self, accepted: bool, new_best: bool) -> None:
        self.stall_iter_accepted = 0 if accepted else self.stall_iter_accepted + 1
        self.reanneal_iter_accepted = 0 if accepted else self.reanneal_iter_accepted + 1
        self.stall_iter_best = 0 if new_best else self.stall_iter_best + 1
        self.reanneal_iter_best = 0 if new_best else self.reanneal_iter_best + 1

    def _draw_uniform(self) -> float:
        return float(torch.rand((), generator=self.rng, dtype=torch.float64).item())

    # ── Solver interface ───────────────────────────────────────────────────

    def init(self, problem: Problem[Any], state: IterState[Any]) -> SolverOutput:
        param = state.take_param()
        if param is None:
            raise NotInitializedError(
                "Simulated Annealing requires an initial parameter vector. "
                "Provide one via Executor.configure(lambda s: s.set_param(x0))."
            )
        cost = problem.cost(param)
        state.set_param(param).set_cost(cost)
        return state, make_kv(
            initial_temperature=self.init_temp,
            stall_iter_accepted_limit=self.stall_iter_accepted_limit,
            stall_iter_best_limit=self.stall_iter_best_limit,
            reanneal_fixed=self.reanneal_fixed,
            reanneal_accepted=self.reanneal_accepted,
            reanneal_best=self.reanneal_best,
        )

    def next_iter(self, problem: Problem[Any], state: IterState[Any]) -> SolverOutput:
        # Order matters: every counter below is tied to the iteration number.
        prev_param = state.take_param()
        if prev_param is None:
            raise NotInitializedError("Simulated Annealing state has no parameter vector.")
        prev_cost = state.cost

        new_param = problem.anneal(prev_param, self.cur_temp)
        new_cost = problem.cost(new_param)

        prob = self._draw_uniform()
        accepted = new_cost < prev_cost or acceptance_probability(new_cost - prev_cost, self.cur_temp) > prob

        new_best_found = new_cost < state.best_cost

        self.update_stall_and_reanneal_iter(accepted, new_best_found)

        r_fixed, r_accepted, r_best = self.reanneal()

        self.temp_iter += 1
        self.reanneal_iter_fixed += 1

        self.update_temperature()

        if accepted:
            state.set_param(new_param).set_cost(new_cost)
        else:
            state.set_param(prev_param).set_cost(prev_cost)

        return state, make_kv(
            t=self.cur_temp,
            new_be=new_best_found,
            acc=accepted,
            st_i_be=self.stall_iter_best,
            st_i_ac=self.stall_iter_accepted,
            ra_i_fi=self.reanneal_iter_fixed,
            ra_i_be=self.reanneal_iter_best,
            ra_i_ac=self.reanneal_iter_accepted,
            ra_fi=r_fixed,
            ra_be=r_best,
            ra_ac=r_accepted,
        )

    def terminate(self, state: IterState[Any]) -> TerminationReason:
        if self.stall_iter_accepted > self.stall_iter_accepted_limit:
            return TerminationReason.ACCEPTED_STALL_ITER_EXCEEDED
        if self.stall_iter_best > self.stall_iter_best_limit:
            return TerminationReason.BEST_STALL_ITER_EXCEEDED
        return TerminationReason.NOT_TERMINATED

    # ── Pickling (checkpoints) ─────────────────────────────────────────────

    def __getstate__(self) -> dict[str, Any]:
        data = self.__dict__.copy()
        data["rng"] = self.rng.get_state()
        return data

    def __setstate__(self, data: dict[str, Any]) -> None:
        rng = torch.Generator()
        rng.set_state(data.pop("rng"))
        self.__dict__.update(data)
        self.rng = rng
