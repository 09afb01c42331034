"""
Snapshot repository for Focus Insights.

PURPOSE: Load complete session and category snapshots from JSON files.
AI CONTEXT: The only module that touches snapshot files. Everything
downstream works on the lists returned here.

STORAGE STRUCTURE:
    .focus_insights/
    ├── sessions.json      # List of session records
    └── categories.json    # List of category records (optional)

Both files also accept a backup document ({"sessions": [...],
"categories": [...]}) as written by export.sessions_to_json().

ERROR HANDLING STRATEGY:
- File not found: Return empty snapshot (default categories for categories)
- JSON corruption: Log error, return empty snapshot
- Bad record: Log warning, skip the record, keep the rest
- Write failure: Log error, return False

USAGE:
    repository = SessionRepository()
    sessions = repository.list_sessions()
    categories = repository.list_categories()
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from .config import Config
from .filesystem import RealFileSystem
from .models import DEFAULT_CATEGORIES, Category, Session

if TYPE_CHECKING:
    from .filesystem import FileSystem

__all__ = ["SessionRepository"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionRepository:
    """
    Read-mostly JSON snapshot store.

    DESIGN PRINCIPLES:
    1. Fail-safe: Never raise on I/O or decode errors
    2. Complete snapshots: Every call rereads the file, no incremental diffs
    3. Tolerant: Individual bad records are skipped, not fatal
    4. Testable: FileSystem can be injected for mocking

    THREAD SAFETY:
    Not thread-safe. One writer (the import command) is assumed.
    """

    def __init__(
        self,
        data_dir: str | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        """
        Initialize repository over a data directory.

        Args:
            data_dir: Directory holding the snapshot files.
                Default: Config.get_data_dir()
            filesystem: FileSystem implementation. Default: RealFileSystem
        """
        self.data_dir = data_dir or Config.get_data_dir()
        self._fs: FileSystem = filesystem or RealFileSystem()
        self.sessions_file = os.path.join(self.data_dir, Config.SESSIONS_FILE)
        self.categories_file = os.path.join(self.data_dir, Config.CATEGORIES_FILE)

    def _read_json(self, file_path: str, default: Any) -> Any:
        """
        Read JSON file with error handling.

        Args:
            file_path: Path to JSON file
            default: Value to return on any error

        Returns:
            Parsed JSON data or default value.
        """
        try:
            content = self._fs.read_text(file_path)
            return json.loads(content)
        except FileNotFoundError:
            return default
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {file_path}: {e}")
            return default
        except OSError as e:
            logger.error(f"Error reading {file_path}: {e}")
            return default

    def _write_json(self, file_path: str, data: Any) -> bool:
        """
        Write JSON file with error handling.

        Returns:
            True on success, False on failure.
        """
        try:
            self._fs.makedirs(self.data_dir, exist_ok=True)
            content = json.dumps(data, indent=2, ensure_ascii=False)
            self._fs.write_text(file_path, content)
            return True
        except OSError as e:
            logger.error(f"Error writing {file_path}: {e}")
            return False

    @staticmethod
    def _records(data: Any, key: str) -> list[Any]:
        """Extract the record list from a bare list, a backup document or an id map."""
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            nested = data.get(key)
            if isinstance(nested, list):
                return nested
            return [value for value in data.values() if isinstance(value, dict)]
        return []

    @staticmethod
    def _parse_records(records: Sequence[Any], parse: Callable[[dict[str, Any]], T]) -> list[T]:
        items: list[T] = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning(f"Skipping record {index}: expected object, got {type(record).__name__}")
                continue
            try:
                items.append(parse(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping record {index}: {e!r}")
        return items

    # =========================================================================
    # SNAPSHOT OPERATIONS
    # =========================================================================

    def has_snapshot(self) -> bool:
        """True if a sessions file is present in the data directory."""
        return self._fs.exists(self.sessions_file)

    def list_sessions(self) -> list[Session]:
        """
        Load the complete session snapshot.

        Business context: Every dashboard render, report and export starts
        from this list; the engine never sees partial data.

        Returns:
            Sessions in file order. Empty list if the file is missing or
            unreadable.

        Example:
            >>> len(SessionRepository('/srv/focus').list_sessions())
            128
        """
        data = self._read_json(self.sessions_file, [])
        return self._parse_records(self._records(data, "sessions"), Session.from_dict)

    def list_categories(self) -> list[Category]:
        """
        Load the complete category snapshot.

        Returns:
            Categories in file order, or DEFAULT_CATEGORIES when the file is
            missing, unreadable or holds no usable record.
        """
        data = self._read_json(self.categories_file, [])
        categories = self._parse_records(self._records(data, "categories"), Category.from_dict)
        if not categories:
            logger.debug("No category snapshot found, using default categories")
            return list(DEFAULT_CATEGORIES)
        return categories

    def save_sessions(self, sessions: Sequence[Session]) -> bool:
        """
        Replace the session snapshot on disk.

        Args:
            sessions: Complete session list to write.

        Returns:
            True on success.
        """
        ok = self._write_json(self.sessions_file, [session.to_dict() for session in sessions])
        if ok:
            logger.info(f"Saved {len(sessions)} sessions to {self.sessions_file}")
        return ok
