# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Observer that logs optimization progress through the structured JSON logger.

`LoggingObserver.term()` writes to stdout, `LoggingObserver.file(path)` to a
log file. Each iteration produces one JSON line with the iteration number,
current and best cost, the iteration the best was found in, evaluation
counts, and whatever diagnostics the solver returned.

The two constructors create a uniquely named logger per observer;
`close()` releases it and its file handle once the run is over. A logger
passed in directly stays the caller's and is left alone.
"""

import itertools
import logging
from pathlib import Path
from typing import Any

from optiloop.core.kv import KV
from optiloop.core.observers.base import Observe
from optiloop.core.state import IterState
from optiloop.logging.logger import get_logger

_instance_ids = itertools.count()


class LoggingObserver(Observe):
    """Logs solver initialization and every observed iteration."""

    def __init__(self, logger: logging.Logger, owns_logger: bool = False) -> None:
        self.logger = logger
        self.owns_logger = owns_logger

    @classmethod
    def term(cls, log_level: str = "INFO") -> "LoggingObserver":
        """Log to stdout."""
        name = f"optiloop.observers.term.{next(_instance_ids)}"
        return cls(get_logger(name, log_level=log_level), owns_logger=True)

    @classmethod
    def file(cls, path: Path, truncate: bool = True, log_level: str = "INFO") -> "LoggingObserver":
        """Log to `path` only. `truncate` starts the file from scratch."""
        name = f"optiloop.observers.file.{next(_instance_ids)}"
        return cls(
            get_logger(name, log_level=log_level, log_file=Path(path), stream=False, truncate=truncate),
            owns_logger=True,
        )

    def close(self) -> None:
        """Close this observer's handlers and drop its logger from the registry."""
        if not self.owns_logger:
            return
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        logging.Logger.manager.loggerDict.pop(self.logger.name, None)

    def observe_init(self, name: str, kv: KV) -> None:
        self.logger.info(name, extra=_prefixed(kv))

    def observe_iter(self, state: IterState[Any], kv: KV) -> None:
        fields: dict[str, Any] = {
            "iter": state.iter,
            "cost": state.cost,
            "best_cost": state.best_cost,
            "best_iter": state.last_best_iter,
        }
        for counter, value in sorted(state.counts.items()):
            fields[counter] = value
        if state.time is not None:
            fields["total_time"] = state.time
        fields.update(_prefixed(kv))
        self.logger.info("iteration", extra=fields)


def _prefixed(kv: KV) -> dict[str, Any]:
    # `extra` keys must not collide with LogRecord attributes ("msg", "name", ...)
    reserved = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
    return {(f"kv_{k}" if k in reserved else k): v for k, v in kv.items()}
