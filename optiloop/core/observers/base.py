# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Observer interface and the container the executor drives.

Observers are called after the solver was initialized and after every
iteration. They get read access to the state and to the solver's key-value
diagnostics and are meant for logging progress, writing parameter vectors to
disk, plotting and the like. An observer that raises stops the run: the
executor does not catch observer errors.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any

from optiloop.core.errors import InvalidParameterError
from optiloop.core.kv import KV
from optiloop.core.state import IterState


class Observe:
    """Base class for observers. Every hook defaults to doing nothing."""

    def observe_init(self, name: str, kv: KV) -> None:
        """Called once after the solver named `name` was initialized."""

    def observe_iter(self, state: IterState[Any], kv: KV) -> None:
        """Called after an iteration, subject to the observer's mode."""

    def close(self) -> None:
        """Release files or handlers the observer holds. Safe to call twice."""


class ObserverModeKind(Enum):
    NEVER = "never"
    ALWAYS = "always"
    EVERY = "every"
    NEW_BEST = "new_best"


@dataclass(frozen=True)
class ObserverMode:
    """
    When to call an observer.

    `always()` calls it every iteration, `every(n)` on iterations divisible by
    n, `new_best()` only on iterations that produced a new best parameter
    vector, and `never()` switches it off. The default is `always()`.
    """

    kind: ObserverModeKind = ObserverModeKind.ALWAYS
    interval: int = 1

    @classmethod
    def never(cls) -> "ObserverMode":
        return cls(ObserverModeKind.NEVER)

    @classmethod
    def always(cls) -> "ObserverMode":
        return cls(ObserverModeKind.ALWAYS)

    @classmethod
    def every(cls, interval: int) -> "ObserverMode":
        if interval < 1:
            raise InvalidParameterError(f"ObserverMode.every needs an interval >= 1, got {interval}")
        return cls(ObserverModeKind.EVERY, interval)

    @classmethod
    def new_best(cls) -> "ObserverMode":
        return cls(ObserverModeKind.NEW_BEST)

    @classmethod
    def from_name(cls, name: str, interval: int | None = None) -> "ObserverMode":
        """Build a mode from its config spelling ('never', 'always', 'every', 'new_best')."""
        if name == "every":
            return cls.every(interval if interval is not None else 1)
        try:
            kind = ObserverModeKind(name)
        except ValueError as err:
            raise InvalidParameterError(f"Unknown observer mode '{name}'") from err
        return cls(kind)

    def should_observe(self, iteration: int, is_best: bool) -> bool:
        if self.kind is ObserverModeKind.ALWAYS:
            return True
        if self.kind is ObserverModeKind.EVERY:
            return iteration % self.interval == 0
        if self.kind is ObserverModeKind.NEW_BEST:
            return is_best
        return False


class Observers(Observe):
    """
    A list of observers, each with its mode.

    Behaves like a single observer: `observe_init` reaches every stored
    observer (the mode only governs iterations), `observe_iter` only those
    whose mode matches. Each entry is called under its own lock, so a
    container shared between threads never runs one observer concurrently.
    """

    def __init__(self) -> None:
        self._observers: list[tuple[Observe, ObserverMode, threading.Lock]] = []

    def push(self, observer: Observe, mode: ObserverMode | None = None) -> "Observers":
        """Add an observer. Returns self for chaining."""
        self._observers.append((observer, mode or ObserverMode.always(), threading.Lock()))
        return self

    def is_empty(self) -> bool:
        return not self._observers

    def __len__(self) -> int:
        return len(self._observers)

    def observe_init(self, name: str, kv: KV) -> None:
        for observer, _, lock in self._observers:
            with lock:
                observer.observe_init(name, kv)

    def observe_iter(self, state: IterState[Any], kv: KV) -> None:
        iteration = state.iter
        is_best = state.is_best()
        for observer, mode, lock in self._observers:
            if mode.should_observe(iteration, is_best):
                with lock:
                    observer.observe_iter(state, kv)

    def close(self) -> None:
        for observer, _, lock in self._observers:
            with lock:
                observer.close()
