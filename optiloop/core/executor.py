# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The executor: runs a solver on a problem until a termination criterion fires.

The loop is explicit. Per iteration:
  1. Evaluate termination criteria (unless the solver already set a reason)
  2. Solver step (`next_iter`)
  3. Move evaluation counts from the problem into the state
  4. Accumulate wall time
  5. Best-so-far bookkeeping (`state.update`)
  6. Observers
  7. Increment the iteration counter
  8. Checkpoint, if the frequency says so

Before the loop the executor either resumes from a checkpoint (skipping
solver init entirely) or initializes the solver and informs the observers.
"""

import logging
import threading
import time
from typing import Any, Callable, Generic, Optional, TypeVar

from optiloop.core.checkpoint import FileCheckpoint
from optiloop.core.kv import KV, make_kv
from optiloop.core.observers.base import Observe, ObserverMode, Observers
from optiloop.core.problem import Problem
from optiloop.core.result import OptimizationResult
from optiloop.core.solver import Solver
from optiloop.core.state import IterState
from optiloop.core.termination import TerminationReason
from optiloop.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)

O = TypeVar("O")


class Executor(Generic[O]):
    """
    Couples a problem, a solver, an initial state, observers and checkpointing.

    Example:
        executor = (
            Executor(problem, SimulatedAnnealing(15.0))
            .configure(lambda s: s.set_param(x0).set_max_iters(1000))
            .add_observer(LoggingObserver.term(), ObserverMode.every(100))
        )
        result = executor.run()
    """

    def __init__(self, problem: O, solver: Solver[O]) -> None:
        self.problem: Problem[O] = problem if isinstance(problem, Problem) else Problem(problem)
        self.solver = solver
        self.state: IterState[Any] = IterState()
        self.observers = Observers()
        self.checkpoint: Optional[FileCheckpoint] = None
        self._timer = True
        self._ctrlc = True
        self._stop = threading.Event()

    def configure(self, init: Callable[[IterState[Any]], Optional[IterState[Any]]]) -> "Executor[O]":
        """Apply `init` to the initial state. It may mutate in place or return a state."""
        configured = init(self.state)
        if configured is not None:
            self.state = configured
        return self

    def add_observer(self, observer: Observe, mode: ObserverMode | None = None) -> "Executor[O]":
        self.observers.push(observer, mode)
        return self

    def checkpointing(self, checkpoint: FileCheckpoint) -> "Executor[O]":
        self.checkpoint = checkpoint
        return self

    def timer(self, enabled: bool) -> "Executor[O]":
        self._timer = enabled
        return self

    def ctrlc(self, enabled: bool) -> "Executor[O]":
        """Whether Ctrl-C ends the run cleanly (True) or propagates (False)."""
        self._ctrlc = enabled
        return self

    def stop(self) -> None:
        """
        Ask a running `run()` to stop after the current iteration.

        Safe to call from another thread or from an observer. A run stopped
        this way ends with ABORTED unless a termination reason was already set.
        """
        self._stop.set()

    def _initialize(self, state: IterState[Any]) -> IterState[Any]:
        max_iters = state.max_iters
        state, init_kv = self.solver.init(self.problem, state)
        state.update()

        if not self.observers.is_empty():
            kv = make_kv(max_iters=max_iters)
            if init_kv is not None:
                kv = kv.merge(init_kv)
            self.observers.observe_init(self.solver.NAME, kv)

        state.func_counts(self.problem)
        return state

    def _resume_or_initialize(self) -> IterState[Any]:
        if self.checkpoint is not None:
            loaded = self.checkpoint.load()
            if loaded is not None:
                self.solver, state = loaded
                logger.info(
                    "Resuming from checkpoint",
                    extra={"solver": self.solver.NAME, "iter": state.iter},
                )
                return state
        return self._initialize(self.state)

    def run(self) -> OptimizationResult:
        """
        Run the optimization to completion.

        Returns:
            OptimizationResult with the problem, the solver and the final state.

        Raises:
            OptimizationError: Whatever the solver, an observer or checkpointing raises.
        """
        self._stop.clear()
        state = self._resume_or_initialize()
        total_time = state.time if (self._timer and state.time is not None) else 0.0

        logger.debug(
            "Optimization started",
            extra={"solver": self.solver.NAME, "iter": state.iter, "max_iters": state.max_iters},
        )

        try:
            while not self._stop.is_set():
                # A reason set inside next_iter must not be overwritten.
                if not state.terminated():
                    state.terminate_with(self.solver.terminate_internal(state))
                if state.terminated():
                    break

                start = time.monotonic() if self._timer else 0.0

                state, iter_kv = self.solver.next_iter(self.problem, state)
                state.func_counts(self.problem)

                duration = 0.0
                if self._timer:
                    duration = time.monotonic() - start
                    total_time += duration
                    state.time = total_time

                state.update()

                if not self.observers.is_empty():
                    kv = iter_kv if iter_kv is not None else KV()
                    if self._timer:
                        kv = kv.merge(make_kv(time=duration))
                    self.observers.observe_iter(state, kv)

                state.increment_iter()

                if self.checkpoint is not None:
                    self.checkpoint.save_cond(self.solver, state, state.iter)
        except KeyboardInterrupt:
            if not self._ctrlc:
                raise
            state.terminate_with(TerminationReason.KEYBOARD_INTERRUPT)

        # Left the loop without a reason while iterations remained.
        if state.iter < state.max_iters and not state.terminated():
            state.terminate_with(TerminationReason.ABORTED)

        logger.info(
            "Optimization finished",
            extra={
                "solver": self.solver.NAME,
                "iters": state.iter,
                "best_cost": state.best_cost,
                "termination": state.termination_reason.value,
            },
        )
        self.state = state
        return OptimizationResult(problem=self.problem, solver=self.solver, state=state)
