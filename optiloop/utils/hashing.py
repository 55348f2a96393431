# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Hashing utilities for optiloop.

Checkpoint payloads carry a SHA256 digest in their sidecar metadata; a resume
verifies it before unpickling anything.
"""

import hashlib
from pathlib import Path

HASH_BUFFER_SIZE = 65536  # 64 KiB


def compute_sha256(file_path: Path) -> str:
    """
    Compute the SHA256 hex digest of a file, reading it in chunks.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while True:
            chunk = f.read(HASH_BUFFER_SIZE)
            if not chunk:
                break
            hasher.update(chunk)
    return hasher.hexdigest()


def compute_sha256_bytes(data: bytes) -> str:
    """Compute the SHA256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def verify_checksum(file_path: Path, expected_hash: str) -> bool:
    """Check whether a file's SHA256 matches the expected lowercase hex digest."""
    return compute_sha256(file_path) == expected_hash.lower()
