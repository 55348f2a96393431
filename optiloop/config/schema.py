# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for optiloop.

Every config section gets its own frozen pydantic model. Frozen means once you
create it, you cannot mutate it: an optimization run is fully described by the
config it was started with, and that snapshot is what ends up in the logs.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

A YAML file may hold only `global:` (for `optiloop info`), or `global:` plus
`problem:`/`solver:`/`executor:` for an actual run. Sections not present stay
None and each command checks it has what it needs.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DirectoryConfig(BaseModel):
    """Paths to the standard project directories, all relative to project root."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    checkpoints: str = Field(default="checkpoints", description="Solver/state snapshots")
    logs: str = Field(default="logs", description="Structured run logs")
    output: str = Field(default="output", description="Parameter dumps and other run artifacts")


class GlobalConfig(BaseModel):
    """
    Cross-cutting settings that apply to the entire system.

    This is the first section loaded and it controls reproducibility (seed),
    observability (log_level) and project identity.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    project_name: str = Field(
        default="optiloop", description="Human-readable project identifier"
    )
    seed: int = Field(
        default=42,
        ge=0,
        description="Global random seed propagated to python and torch",
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output, relative to project root",
    )
    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)


class ProblemConfig(BaseModel):
    """
    The problem to minimize: one of the built-in test functions, explored by a
    bounded random walk.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    function: Literal["rosenbrock", "sphere", "rastrigin"] = Field(
        default="rosenbrock",
        description="Built-in cost function",
    )
    init_param: list[float] = Field(
        default_factory=lambda: [1.2, 1.2],
        min_length=1,
        description="Initial guess handed to the solver",
    )
    lower_bound: float = Field(default=-5.0, description="Lower bound for every coordinate")
    upper_bound: float = Field(default=5.0, description="Upper bound for every coordinate")
    step_size: float = Field(
        default=0.1,
        gt=0.0,
        description="Maximum change of a single coordinate per annealing move",
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> "ProblemConfig":
        if self.lower_bound >= self.upper_bound:
            raise ValueError("lower_bound must be smaller than upper_bound")
        if self.function == "rosenbrock" and len(self.init_param) < 2:
            raise ValueError("rosenbrock needs an init_param with at least two coordinates")
        return self


class SolverConfig(BaseModel):
    """
    Simulated Annealing settings.

    Limits left at None are unbounded: the solver never stalls out or
    reanneals on that criterion.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    init_temp: float = Field(default=15.0, gt=0.0, description="Initial temperature")
    temp_func: Literal["temperature_fast", "boltzmann", "exponential"] = Field(
        default="temperature_fast",
        description="Cooling schedule",
    )
    exponential_factor: float = Field(
        default=0.95,
        gt=0.0,
        lt=1.0,
        description="Base x of t_i = t_init * x^i, only used by the exponential schedule",
    )
    stall_accepted: Optional[int] = Field(default=None, ge=0)
    stall_best: Optional[int] = Field(default=None, ge=0)
    reanneal_fixed: Optional[int] = Field(default=None, ge=0)
    reanneal_accepted: Optional[int] = Field(default=None, ge=0)
    reanneal_best: Optional[int] = Field(default=None, ge=0)


class CheckpointConfig(BaseModel):
    """Where and how often the executor snapshots solver and state."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    directory: Optional[str] = Field(
        default=None,
        description="Checkpoint directory; defaults to global.directories.checkpoints",
    )
    filename: str = Field(default="optim", description="File stem of the checkpoint")
    frequency: Literal["never", "always", "every"] = Field(default="never")
    interval: int = Field(default=1, ge=1, description="Used with frequency 'every'")


class ExecutorConfig(BaseModel):
    """Iteration limits and run-loop behaviour."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    max_iters: int = Field(default=1000, ge=0)
    target_cost: Optional[float] = Field(
        default=None,
        description="Stop once the best cost is at or below this value",
    )
    timer: bool = Field(default=True, description="Measure per-iteration wall time")
    ctrlc: bool = Field(
        default=True,
        description="Turn Ctrl-C into a clean KEYBOARD_INTERRUPT termination",
    )
    checkpoint: CheckpointConfig = Field(default_factory=CheckpointConfig)


class ObserverConfig(BaseModel):
    """One observer attached to the executor."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    kind: Literal["log", "file"] = Field(description="'log' for JSON logging, 'file' for param dumps")
    mode: Literal["never", "always", "every", "new_best"] = Field(default="always")
    interval: Optional[int] = Field(default=None, ge=1)
    path: Optional[str] = Field(
        default=None,
        description="Log file for kind 'log'; stdout when omitted",
    )
    truncate: bool = Field(default=True)
    directory: Optional[str] = Field(
        default=None,
        description="Output directory for kind 'file'; defaults to global.directories.output",
    )
    prefix: str = Field(default="param")
    serializer: Literal["json", "torch"] = Field(default="json")

    @model_validator(mode="after")
    def _check_interval(self) -> "ObserverConfig":
        if self.mode == "every" and self.interval is None:
            raise ValueError("observer mode 'every' requires an interval")
        return self


class DocsConfig(BaseModel):
    """Inputs and outputs of the documentation tooling."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    book_directory: str = Field(default="docs/book")
    harness_directory: str = Field(default="tests/book")
    implementors_directory: str = Field(default="docs/implementors")
    workflow_file: str = Field(default=".github/workflows/book.yml")


class OptiloopConfig(BaseModel):
    """
    Top-level config container. Each CLI command loads the sections it needs.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    problem: Optional[ProblemConfig] = Field(default=None)
    solver: Optional[SolverConfig] = Field(default=None)
    executor: Optional[ExecutorConfig] = Field(default=None)
    observers: list[ObserverConfig] = Field(default_factory=list)
    docs: Optional[DocsConfig] = Field(default=None)
