# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Builds and runs an optimization from a validated config.

This is what `optiloop run` executes: a built-in test function explored by
a bounded random walk, minimized by Simulated Annealing, with the observers
and checkpointing the config asks for. Every piece is constructed from the
frozen config; nothing here reads the environment.
"""

import logging
from pathlib import Path

import torch

from optiloop.config.schema import (
    CheckpointConfig,
    ExecutorConfig,
    ObserverConfig,
    OptiloopConfig,
    ProblemConfig,
    SolverConfig,
)
from optiloop.core.checkpoint import CheckpointingFrequency, FileCheckpoint
from optiloop.core.executor import Executor
from optiloop.core.observers import LoggingObserver, Observe, ObserverMode, WriteToFile, WriteToFileSerializer
from optiloop.core.result import OptimizationResult
from optiloop.logging.logger import get_logger
from optiloop.problems import BoundedRandomWalk
from optiloop.solver.simulated_annealing import SATempFunc, SimulatedAnnealing
from optiloop.testfunctions import get_test_function
from optiloop.utils.paths import resolve_under_root

logger: logging.Logger = get_logger(__name__)


def build_problem(config: ProblemConfig) -> BoundedRandomWalk:
    return BoundedRandomWalk(
        cost_fn=get_test_function(config.function),
        lower_bound=config.lower_bound,
        upper_bound=config.upper_bound,
        step=config.step_size,
    )


def build_solver(config: SolverConfig) -> SimulatedAnnealing:
    solver = SimulatedAnnealing(config.init_temp).with_temp_func(
        SATempFunc(config.temp_func), factor=config.exponential_factor
    )
    if config.stall_accepted is not None:
        solver.with_stall_accepted(config.stall_accepted)
    if config.stall_best is not None:
        solver.with_stall_best(config.stall_best)
    if config.reanneal_fixed is not None:
        solver.with_reannealing_fixed(config.reanneal_fixed)
    if config.reanneal_accepted is not None:
        solver.with_reannealing_accepted(config.reanneal_accepted)
    if config.reanneal_best is not None:
        solver.with_reannealing_best(config.reanneal_best)
    return solver


def build_observer(config: ObserverConfig, output_dir: Path, project_root: Path, log_level: str) -> Observe:
    if config.kind == "log":
        if config.path is None:
            return LoggingObserver.term(log_level=log_level)
        return LoggingObserver.file(
            resolve_under_root(config.path, project_root), truncate=config.truncate, log_level=log_level
        )
    directory = resolve_under_root(config.directory, project_root) if config.directory else output_dir
    return WriteToFile(directory, prefix=config.prefix, serializer=WriteToFileSerializer(config.serializer))


def build_checkpoint(config: CheckpointConfig, default_dir: Path, project_root: Path) -> FileCheckpoint:
    if config.frequency == "always":
        frequency = CheckpointingFrequency.always()
    elif config.frequency == "every":
        frequency = CheckpointingFrequency.every(config.interval)
    else:
        frequency = CheckpointingFrequency.never()
    directory = resolve_under_root(config.directory, project_root) if config.directory else default_dir
    return FileCheckpoint(directory=directory, filename=config.filename, frequency=frequency)


def build_executor(config: OptiloopConfig, project_root: Path) -> Executor:
    """
    Assemble the executor described by `config`.

    Raises:
        ValueError: If the problem section is missing.
    """
    if config.problem is None:
        raise ValueError("A 'problem' section is required to run an optimization")

    solver_cfg = config.solver or SolverConfig()
    executor_cfg = config.executor or ExecutorConfig()
    global_cfg = config.global_config

    problem = build_problem(config.problem)
    solver = build_solver(solver_cfg)
    init_param = torch.tensor(config.problem.init_param, dtype=torch.float64)

    def _configure(state):  # type: ignore[no-untyped-def]
        state.set_param(init_param).set_max_iters(executor_cfg.max_iters)
        if executor_cfg.target_cost is not None:
            state.set_target_cost(executor_cfg.target_cost)
        return state

    executor = (
        Executor(problem, solver)
        .configure(_configure)
        .timer(executor_cfg.timer)
        .ctrlc(executor_cfg.ctrlc)
    )

    output_dir = resolve_under_root(global_cfg.directories.output, project_root)
    for observer_cfg in config.observers:
        observer = build_observer(observer_cfg, output_dir, project_root, global_cfg.log_level)
        executor.add_observer(observer, ObserverMode.from_name(observer_cfg.mode, observer_cfg.interval))

    if executor_cfg.checkpoint.frequency != "never":
        checkpoint_dir = resolve_under_root(global_cfg.directories.checkpoints, project_root)
        executor.checkpointing(build_checkpoint(executor_cfg.checkpoint, checkpoint_dir, project_root))

    return executor


def run_from_config(config: OptiloopConfig, project_root: Path) -> OptimizationResult:
    """Build the executor and run it to completion."""
    executor = build_executor(config, project_root)
    logger.info(
        "Run configured",
        extra={
            "function": config.problem.function if config.problem else None,
            "solver": executor.solver.NAME,
            "observers": len(executor.observers),
            "checkpointing": executor.checkpoint is not None,
        },
    )
    try:
        return executor.run()
    finally:
        executor.observers.close()
