# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Why an optimization run stopped."""

from enum import Enum


class TerminationReason(Enum):
    NOT_TERMINATED = "not_terminated"
    MAX_ITERS_REACHED = "max_iters_reached"
    TARGET_COST_REACHED = "target_cost_reached"
    ACCEPTED_STALL_ITER_EXCEEDED = "accepted_stall_iter_exceeded"
    BEST_STALL_ITER_EXCEEDED = "best_stall_iter_exceeded"
    SOLVER_CONVERGED = "solver_converged"
    KEYBOARD_INTERRUPT = "keyboard_interrupt"
    ABORTED = "aborted"

    @property
    def terminated(self) -> bool:
        return self is not TerminationReason.NOT_TERMINATED

    @property
    def text(self) -> str:
        return _TEXT[self]

    def __str__(self) -> str:
        return self.text


_TEXT = {
    TerminationReason.NOT_TERMINATED: "Not terminated",
    TerminationReason.MAX_ITERS_REACHED: "Maximum number of iterations reached",
    TerminationReason.TARGET_COST_REACHED: "Target cost value reached",
    TerminationReason.ACCEPTED_STALL_ITER_EXCEEDED: "Exceeded maximum number of accepted stall iterations",
    TerminationReason.BEST_STALL_ITER_EXCEEDED: "Exceeded maximum number of best stall iterations",
    TerminationReason.SOLVER_CONVERGED: "Solver converged",
    TerminationReason.KEYBOARD_INTERRUPT: "Keyboard interrupt",
    TerminationReason.ABORTED: "Optimization aborted",
}
