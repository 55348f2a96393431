# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Atomic checkpointing of solver and state.

A checkpoint is two files in the checkpoint directory:
  <filename>.pt    torch-serialized (solver, state) pair
  <filename>.json  metadata: iteration, solver name, SHA256 of the .pt file

The payload is written first, then the metadata, both via temp file and
rename. A resume reads the metadata, verifies the digest and only then
unpickles the payload, so a half-written or tampered checkpoint is reported
instead of silently resuming from garbage.

The problem itself is not part of the checkpoint. On resume the caller
supplies the same problem again.
"""

import io
import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import torch

from optiloop.core.errors import CheckpointCorruptError, InvalidParameterError
from optiloop.core.solver import Solver
from optiloop.core.state import IterState
from optiloop.logging.logger import get_logger
from optiloop.utils.filesystem import atomic_write, atomic_write_bytes
from optiloop.utils.hashing import compute_sha256_bytes, verify_checksum

logger: logging.Logger = get_logger(__name__)

CHECKPOINT_FORMAT_VERSION = 1


class CheckpointingFrequencyKind(Enum):
    NEVER = "never"
    EVERY = "every"
    ALWAYS = "always"


@dataclass(frozen=True)
class CheckpointingFrequency:
    """How often `save_cond` actually saves. Defaults to never."""

    kind: CheckpointingFrequencyKind = CheckpointingFrequencyKind.NEVER
    interval: int = 1

    @classmethod
    def never(cls) -> "CheckpointingFrequency":
        return cls(CheckpointingFrequencyKind.NEVER)

    @classmethod
    def always(cls) -> "CheckpointingFrequency":
        return cls(CheckpointingFrequencyKind.ALWAYS)

    @classmethod
    def every(cls, interval: int) -> "CheckpointingFrequency":
        if interval < 1:
            raise InvalidParameterError(
                f"CheckpointingFrequency.every needs an interval >= 1, got {interval}"
            )
        return cls(CheckpointingFrequencyKind.EVERY, interval)

    def should_save(self, iteration: int) -> bool:
        if self.kind is CheckpointingFrequencyKind.ALWAYS:
            return True
        if self.kind is CheckpointingFrequencyKind.EVERY:
            return iteration % self.interval == 0
        return False


@dataclass(frozen=True)
class CheckpointMetadata:
    """Sidecar metadata stored next to the payload."""

    iter: int
    solver: str
    sha256: str
    format_version: int = CHECKPOINT_FORMAT_VERSION


class FileCheckpoint:
    """Saves to and loads from `<directory>/<filename>.pt`."""

    def __init__(
        self,
        directory: Path = Path(".checkpoints"),
        filename: str = "optim",
        frequency: CheckpointingFrequency = CheckpointingFrequency.never(),
    ) -> None:
        self.directory = Path(directory)
        self.filename = filename
        self.frequency = frequency

    @property
    def payload_path(self) -> Path:
        return self.directory / f"{self.filename}.pt"

    @property
    def metadata_path(self) -> Path:
        return self.directory / f"{self.filename}.json"

    def exists(self) -> bool:
        return self.payload_path.is_file() and self.metadata_path.is_file()

    def save(self, solver: Solver[Any], state: IterState[Any]) -> Path:
        """Write solver and state atomically. Returns the payload path."""
        buffer = io.BytesIO()
        torch.save({"solver": solver, "state": state}, buffer)
        payload = buffer.getvalue()

        metadata = CheckpointMetadata(
            iter=state.iter,
            solver=solver.NAME,
            sha256=compute_sha256_bytes(payload),
        )

        atomic_write_bytes(self.payload_path, payload)
        atomic_write(self.metadata_path, json.dumps(metadata.__dict__, indent=2))

        logger.info(
            "Checkpoint saved",
            extra={"iter": state.iter, "solver": solver.NAME, "path": str(self.payload_path)},
        )
        return self.payload_path

    def save_cond(self, solver: Solver[Any], state: IterState[Any], iteration: int) -> Optional[Path]:
        """Save if the configured frequency says so for `iteration`."""
        if self.frequency.should_save(iteration):
            return self.save(solver, state)
        return None

    def read_metadata(self) -> CheckpointMetadata:
        try:
            raw = json.loads(self.metadata_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as err:
            raise CheckpointCorruptError(f"Unreadable checkpoint metadata in {self.metadata_path}") from err
        if not isinstance(raw, dict):
            raise CheckpointCorruptError(f"Malformed checkpoint metadata in {self.metadata_path}")
        try:
            return CheckpointMetadata(**raw)
        except TypeError as err:
            raise CheckpointCorruptError(f"Malformed checkpoint metadata in {self.metadata_path}") from err

    def load(self) -> Optional[tuple[Solver[Any], IterState[Any]]]:
        """
        Load the last saved solver and state.

        Returns:
            None if no checkpoint exists yet, otherwise the (solver, state) pair.

        Raises:
            CheckpointCorruptError: If the payload doesn't match its metadata.
        """
        if not self.exists():
            return None

        metadata = self.read_metadata()
        if not verify_checksum(self.payload_path, metadata.sha256):
            raise CheckpointCorruptError(
                f"Checksum mismatch for {self.payload_path}; refusing to resume"
            )

        data = torch.load(self.payload_path, map_location="cpu", weights_only=False)
        if not isinstance(data, dict) or "solver" not in data or "state" not in data:
            raise CheckpointCorruptError(f"Unexpected checkpoint layout in {self.payload_path}")

        logger.info(
            "Checkpoint loaded",
            extra={"iter": metadata.iter, "solver": metadata.solver, "path": str(self.payload_path)},
        )
        return data["solver"], data["state"]
