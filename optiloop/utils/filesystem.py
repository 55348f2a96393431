# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Safe filesystem operations for optiloop.

Checkpoints, parameter dumps and documentation manifests are all written
through here. Writes are atomic: content goes to a temporary file in the
target's directory and is then renamed over the target, which is atomic on
POSIX as long as both live on the same filesystem. A crash mid-write leaves
a stray temp file, never a half-written checkpoint.
"""

import tempfile
from pathlib import Path
from typing import IO, Callable


def _atomic_write_with(target_path: Path, mode: str, writer: Callable[[IO], None], **kwargs) -> None:
    target_path.parent.mkdir(parents=True, exist_ok=True)

    # delete=False because the file has to survive closing so we can rename it.
    temp_fd = tempfile.NamedTemporaryFile(
        mode=mode,
        dir=str(target_path.parent),
        prefix=".optiloop_tmp_",
        suffix=".tmp",
        delete=False,
        **kwargs,
    )
    temp_path = Path(temp_fd.name)

    try:
        writer(temp_fd)
        temp_fd.flush()
        temp_fd.close()
        temp_path.replace(target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write text to a file atomically.

    If anything goes wrong during the write (disk full, permissions, crash),
    the target file is never touched: you either get the full new content or
    the old content.

    Args:
        target_path: Where the final file should end up.
        content: The string content to write.
        encoding: Text encoding to use.

    Raises:
        OSError: If the write or rename fails.
    """
    _atomic_write_with(target_path, "w", lambda fd: fd.write(content), encoding=encoding)


def atomic_write_bytes(target_path: Path, data: bytes) -> None:
    """Write binary data to a file atomically. Same approach as atomic_write."""
    _atomic_write_with(target_path, "wb", lambda fd: fd.write(data))


def safe_read(file_path: Path, encoding: str = "utf-8") -> str:
    """
    Read a text file with proper error context.

    Raises:
        FileNotFoundError: If the path doesn't exist.
        IsADirectoryError: If the path is a directory.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if not file_path.is_file():
        raise IsADirectoryError(f"Expected a file, got a directory: {file_path}")
    return file_path.read_text(encoding=encoding)


def safe_delete(file_path: Path) -> bool:
    """
    Delete a file if it exists. Returns whether anything was actually deleted.

    Never raises on a missing file.
    """
    if file_path.exists():
        file_path.unlink()
        return True
    return False
