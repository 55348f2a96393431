# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Observers for optimization runs.

  - base: the Observe interface, ObserverMode and the Observers container
  - logger: LoggingObserver, structured JSON progress logs
  - file: WriteToFile, parameter vector dumps
"""

from optiloop.core.observers.base import Observe, ObserverMode, ObserverModeKind, Observers
from optiloop.core.observers.file import WriteToFile, WriteToFileSerializer
from optiloop.core.observers.logger import LoggingObserver

__all__ = [
    "LoggingObserver",
    "Observe",
    "ObserverMode",
    "ObserverModeKind",
    "Observers",
    "WriteToFile",
    "WriteToFileSerializer",
]
