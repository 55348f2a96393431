# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Observer that writes the current parameter vector to disk.

One file per observed iteration, named `<prefix>_<iter>.<ext>` inside the
configured directory. JSON output is human readable and works for tensors,
lists and scalars; torch output keeps tensors bit-exact.
"""

import io
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

import torch

from optiloop.core.kv import KV
from optiloop.core.observers.base import Observe
from optiloop.core.state import IterState
from optiloop.logging.logger import get_logger
from optiloop.utils.filesystem import atomic_write, atomic_write_bytes

logger: logging.Logger = get_logger(__name__)


class WriteToFileSerializer(Enum):
    JSON = "json"
    TORCH = "torch"

    @property
    def extension(self) -> str:
        return "json" if self is WriteToFileSerializer.JSON else "pt"


def param_to_jsonable(param: Any) -> Any:
    """Turn tensors (and containers of them) into plain Python values."""
    if isinstance(param, torch.Tensor):
        return param.detach().cpu().tolist()
    if isinstance(param, (list, tuple)):
        return [param_to_jsonable(p) for p in param]
    if isinstance(param, dict):
        return {str(k): param_to_jsonable(v) for k, v in param.items()}
    return param


class WriteToFile(Observe):
    """
    Writes `state.param` to `<directory>/<prefix>_<iter>.<ext>`.

    Iterations without a parameter vector are skipped.
    """

    def __init__(
        self,
        directory: Path,
        prefix: str = "param",
        serializer: WriteToFileSerializer = WriteToFileSerializer.JSON,
    ) -> None:
        self.directory = Path(directory)
        self.prefix = prefix
        self.serializer = serializer

    def path_for(self, iteration: int) -> Path:
        return self.directory / f"{self.prefix}_{iteration}.{self.serializer.extension}"

    def observe_iter(self, state: IterState[Any], kv: KV) -> None:
        if state.param is None:
            return

        target = self.path_for(state.iter)
        if self.serializer is WriteToFileSerializer.JSON:
            atomic_write(target, json.dumps(param_to_jsonable(state.param)))
        else:
            buffer = io.BytesIO()
            torch.save(state.param, buffer)
            atomic_write_bytes(target, buffer.getvalue())

        logger.debug("Parameter vector written", extra={"iter": state.iter, "path": str(target)})
