# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Standard test functions for optimization, over 1-D torch tensors.

All three have a known global minimum of 0:
  - rosenbrock at (a, a^2, ...), i.e. all ones for the default a=1
  - sphere at the origin
  - rastrigin at the origin
"""

import math
from typing import Callable

import torch

TestFunction = Callable[[torch.Tensor], float]


def rosenbrock(x: torch.Tensor, a: float = 1.0, b: float = 100.0) -> float:
    """Multidimensional Rosenbrock: sum of (a - x_i)^2 + b (x_{i+1} - x_i^2)^2."""
    if x.numel() < 2:
        raise ValueError("rosenbrock needs at least two dimensions")
    head, tail = x[:-1], x[1:]
    return float(((a - head) ** 2 + b * (tail - head**2) ** 2).sum().item())


def sphere(x: torch.Tensor) -> float:
    """Sum of squares."""
    return float((x**2).sum().item())


def rastrigin(x: torch.Tensor, a: float = 10.0) -> float:
    """a*n + sum of x_i^2 - a cos(2 pi x_i)."""
    n = x.numel()
    return float((a * n + (x**2 - a * torch.cos(2.0 * math.pi * x)).sum()).item())


_TEST_FUNCTIONS: dict[str, TestFunction] = {
    "rosenbrock": rosenbrock,
    "sphere": sphere,
    "rastrigin": rastrigin,
}


def get_test_function(name: str) -> TestFunction:
    """
    Look up a test function by name.

    Raises:
        KeyError: If `name` is unknown.
    """
    if name not in _TEST_FUNCTIONS:
        raise KeyError(f"Unknown test function '{name}'. Available: {list_test_functions()}")
    return _TEST_FUNCTIONS[name]


def list_test_functions() -> list[str]:
    return sorted(_TEST_FUNCTIONS)
