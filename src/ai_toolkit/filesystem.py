"""Filesystem abstraction for testability.

This module provides a filesystem abstraction that enables testing
without real I/O operations. The RealFileSystem implementation
wraps standard library operations and owns the atomic write primitive
used for every file the installer creates or replaces.
"""

from __future__ import annotations

import os
import secrets
import shutil
from pathlib import Path


class RealFileSystem:
    """Production filesystem implementation.

    Wraps standard library Path, os and shutil operations.
    Satisfies the FileSystem protocol structurally.
    """

    def read_text(self, path: Path) -> str:
        """Read UTF-8 text content from a file."""
        return path.read_text(encoding="utf-8")

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        return path.exists()

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a file byte-for-byte."""
        shutil.copyfile(src, dst)

    def atomic_write(self, path: Path, content: str) -> None:
        """Write text so that ``path`` never holds a partially written file.

        Content goes to a uniquely named temp file in the same directory,
        which is then renamed over ``path``. Parent directories are created
        as needed. On failure the temp file is removed and the error re-raised.

        Args:
            path: Destination file.
            content: Text to write (UTF-8).
        """
        directory = path.parent
        directory.mkdir(parents=True, exist_ok=True)
        temp_path = directory / f".{path.name}.{secrets.token_hex(8)}.tmp"

        try:
            with open(temp_path, "x", encoding="utf-8", newline="") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
