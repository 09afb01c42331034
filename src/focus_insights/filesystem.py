"""
File access used by the snapshot repository and the export/import commands.

PURPOSE: Keep disk access behind a small interface so snapshot handling can
be tested with an in-memory double (tests/conftest.py MockFileSystem).
AI CONTEXT: Snapshot files are shared with a sync client that may read them
at any moment, so RealFileSystem replaces files atomically.

USAGE:
    repository = SessionRepository(filesystem=RealFileSystem())
"""

from __future__ import annotations

import os
import tempfile
from typing import Protocol

__all__ = ["FileSystem", "RealFileSystem"]


class FileSystem(Protocol):
    """
    Operations the snapshot repository and CLI perform on files.

    Implementations raise the usual built-in exceptions (FileNotFoundError,
    PermissionError, other OSError); callers decide whether to log or
    propagate.
    """

    def exists(self, path: str) -> bool:
        """True if a file or directory is present at path."""
        ...

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """Create path and any missing parents."""
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """
        Return the whole file as text.

        Raises:
            FileNotFoundError: If nothing exists at path.
        """
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Replace the file's content.

        Readers observe either the old or the new content, never a partial
        write.

        Raises:
            PermissionError: If the file or its directory is not writable.
        """
        ...


class RealFileSystem:
    """Disk-backed FileSystem."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        os.makedirs(path, exist_ok=exist_ok)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        with open(path, encoding=encoding) as f:
            return f.read()

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Write content to a sibling temp file, then rename it over path.

        Business context: The mobile sync client polls sessions.json. A
        plain open('w') would let it read a truncated snapshot while the
        import command is writing.

        Raises:
            OSError: If the directory does not exist or is not writable.

        Example:
            >>> RealFileSystem().write_text('.focus_insights/sessions.json', '[]')
        """
        directory = os.path.dirname(os.path.abspath(path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding=encoding) as f:
                f.write(content)
            os.replace(tmp_path, path)
        except BaseException:
            os.unlink(tmp_path)
            raise
