# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Ready-made problems for the annealing solver.

BoundedRandomWalk turns any cost function over a 1-D tensor into a problem
Simulated Annealing can work on: the move modifies floor(temperature) + 1
randomly picked coordinates by a uniform amount in [-step, step] and clamps
the result to the box constraints. High temperatures shake many coordinates
at once, low temperatures only one.
"""

import math
from typing import Callable, Optional

import torch


class BoundedRandomWalk:
    """
    Cost function plus random-walk annealing inside box constraints.

    Args:
        cost_fn: Maps a 1-D tensor to a float.
        lower_bound: Scalar or per-coordinate lower bounds.
        upper_bound: Scalar or per-coordinate upper bounds.
        step: Maximum change of one coordinate per modification.
        generator: Random source for the moves. Defaults to a generator
                   seeded from torch's global one.
    """

    def __init__(
        self,
        cost_fn: Callable[[torch.Tensor], float],
        lower_bound: float | torch.Tensor,
        upper_bound: float | torch.Tensor,
        step: float = 0.1,
        generator: Optional[torch.Generator] = None,
    ) -> None:
        if step <= 0.0:
            raise ValueError(f"step must be > 0, got {step}")
        if generator is None:
            generator = torch.Generator()
            generator.manual_seed(int(torch.randint(0, 2**62, (1,)).item()))
        self.cost_fn = cost_fn
        self.lower_bound = torch.as_tensor(lower_bound, dtype=torch.float64)
        self.upper_bound = torch.as_tensor(upper_bound, dtype=torch.float64)
        self.step = float(step)
        self.generator = generator

    def cost(self, param: torch.Tensor) -> float:
        return self.cost_fn(param)

    def anneal(self, param: torch.Tensor, extent: float) -> torch.Tensor:
        new_param = param.clone()
        lower = self.lower_bound.expand_as(new_param)
        upper = self.upper_bound.expand_as(new_param)

        moves = 1 if math.isinf(extent) else int(math.floor(extent)) + 1
        # More moves than coordinates only re-visits the same ones.
        moves = min(moves, 10 * new_param.numel())
        for _ in range(moves):
            idx = int(torch.randint(0, new_param.numel(), (1,), generator=self.generator).item())
            u = torch.rand((), generator=self.generator, dtype=torch.float64).item()
            delta = (2.0 * u - 1.0) * self.step
            value = new_param[idx] + delta
            new_param[idx] = torch.clamp(value, lower[idx], upper[idx])
        return new_param
