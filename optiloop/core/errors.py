# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised by solvers, the executor and checkpointing.

Everything derives from OptimizationError so callers (the CLI in particular)
can tell a failed optimization apart from a bug elsewhere.
"""


class OptimizationError(Exception):
    """Base for all errors raised while setting up or running an optimization."""


class InvalidParameterError(OptimizationError):
    """A solver or observer was configured with a value outside its valid range."""


class NotImplementedInSolverError(OptimizationError):
    """The problem lacks an operation the solver needs (e.g. `anneal`)."""


class NotInitializedError(OptimizationError):
    """Something the solver needs (usually the initial parameter vector) was never provided."""


class ConditionViolatedError(OptimizationError):
    """A precondition of the algorithm does not hold."""


class CheckpointNotFoundError(OptimizationError):
    """A checkpoint was expected on disk but isn't there."""


class CheckpointCorruptError(OptimizationError):
    """A checkpoint exists but its payload doesn't match the recorded checksum."""


class PotentialBugError(OptimizationError):
    """An internal invariant broke. Please report this."""
