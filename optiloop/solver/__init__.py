# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Solvers shipped with optiloop.

  - simulated_annealing: Simulated Annealing with reannealing and stall criteria
"""

from optiloop.solver.simulated_annealing import SATempFunc, SimulatedAnnealing

__all__ = ["SATempFunc", "SimulatedAnnealing"]
