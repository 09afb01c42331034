"""
Pytest configuration and shared fixtures for Focus Insights tests.

Contents:
- MockFileSystem: dict-backed FileSystem so storage tests never touch disk
- make_session: Compact Session builder for test data
- Shared fixtures (fixed reference time, scenario snapshot, repository)
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import pytest

from focus_insights.config import Config
from focus_insights.models import DEFAULT_CATEGORIES, Category, Session
from focus_insights.storage import SessionRepository

NOW = datetime(2026, 10, 17, 15, 0, tzinfo=UTC)
"""Saturday 17 October 2026, 15:00 UTC - the fixed clock used across tests."""

DATA_DIR = "/data"
MINUTE_MS = 60 * 1000


def make_session(
    session_id: str,
    started_at: datetime | str,
    minutes: float,
    category_id: str = "work",
    title: str | None = None,
    notes: str | None = None,
) -> Session:
    """
    Build a Session whose end time is start + minutes.

    A string start is stored verbatim (for malformed-timestamp tests) and
    the end time is then copied from it.
    """
    duration_ms = int(minutes * MINUTE_MS)
    if isinstance(started_at, datetime):
        start = started_at.isoformat()
        end = (started_at + timedelta(milliseconds=duration_ms)).isoformat()
    else:
        start = end = started_at
    return Session(
        id=session_id,
        title=title or f"Session {session_id}",
        category_id=category_id,
        duration_ms=duration_ms,
        started_at=start,
        ended_at=end,
        notes=notes,
    )


def _parents(path: str) -> list[str]:
    """'/a/b/c' -> ['/a', '/a/b', '/a/b/c']"""
    parts = [p for p in path.rstrip("/").split("/") if p]
    return ["/" + "/".join(parts[: i + 1]) for i in range(len(parts))]


class MockFileSystem:
    """
    Dict-backed stand-in for RealFileSystem.

    Files live in a path -> text mapping and directories in a set. Individual
    paths can be marked read-only (writes raise PermissionError) or
    unreadable (reads raise OSError) to drive the repository error paths.
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._dirs: set[str] = set()
        self._read_only: set[str] = set()
        self._unreadable: set[str] = set()

    def exists(self, path: str) -> bool:
        return path in self._files or path in self._dirs

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        if path in self._files:
            raise OSError(f"{path} is a file")
        if path in self._dirs and not exist_ok:
            raise OSError(f"{path} already exists")
        self._dirs.update(_parents(path))

    def read_text(self, path: str, encoding: str = "utf-8") -> str:  # noqa: ARG002
        if path in self._unreadable:
            raise OSError(f"cannot read {path}")
        try:
            return self._files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:  # noqa: ARG002
        if path in self._read_only:
            raise PermissionError(path)
        self._dirs.update(_parents(path)[:-1])
        self._files[path] = content

    # -- helpers for arranging tests --------------------------------------

    def get_file(self, path: str) -> str | None:
        return self._files.get(path)

    def set_file(self, path: str, content: str) -> None:
        """Seed a file; honours read-only marks like a normal write."""
        self.write_text(path, content)

    def set_read_only(self, path: str) -> None:
        self._read_only.add(path)

    def set_unreadable(self, path: str) -> None:
        self._unreadable.add(path)

    def list_files(self) -> list[str]:
        return sorted(self._files)


def write_snapshot(
    fs: MockFileSystem,
    sessions: list[Session],
    categories: list[Category] | None = None,
) -> None:
    """Store sessions (and optionally categories) under DATA_DIR in the mock filesystem."""
    fs.set_file(
        f"{DATA_DIR}/{Config.SESSIONS_FILE}",
        json.dumps([s.to_dict() for s in sessions]),
    )
    if categories is not None:
        fs.set_file(
            f"{DATA_DIR}/{Config.CATEGORIES_FILE}",
            json.dumps([c.to_dict() for c in categories]),
        )


@pytest.fixture
def mock_fs() -> MockFileSystem:
    """Empty in-memory filesystem, fresh per test."""
    return MockFileSystem()


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant: Saturday 2026-10-17 15:00 UTC."""
    return NOW


@pytest.fixture
def categories() -> list[Category]:
    """The five default categories."""
    return list(DEFAULT_CATEGORIES)


@pytest.fixture
def scenario_sessions() -> list[Session]:
    """
    Six sessions around NOW.

    - today: 30 + 30 + 30 = 90 minutes (work, study, work)
    - yesterday: 40 + 20 = 60 minutes (study, habits)
    - ten days ago: 60 minutes (work)

    Expected: today 1h 30m, growth +50, current streak 2 (today and
    yesterday), average 210 / 6 = 35 minutes.
    """
    today = NOW.replace(hour=0)
    yesterday = today - timedelta(days=1)
    ten_days_ago = today - timedelta(days=10)
    return [
        make_session("t1", today.replace(hour=9), 30, "work", "Write report"),
        make_session("t2", today.replace(hour=11), 30, "study", "Read chapter 4", "draft notes"),
        make_session("t3", today.replace(hour=13), 30, "work", "Code review"),
        make_session("y1", yesterday.replace(hour=10), 40, "study", "Flashcards"),
        make_session("y2", yesterday.replace(hour=16), 20, "habits", "Meditation"),
        make_session("old", ten_days_ago.replace(hour=10), 60, "work", "Planning draft"),
    ]


@pytest.fixture
def repository(mock_fs: MockFileSystem, scenario_sessions: list[Session]) -> SessionRepository:
    """SessionRepository over the scenario snapshot (default categories)."""
    write_snapshot(mock_fs, scenario_sessions)
    return SessionRepository(data_dir=DATA_DIR, filesystem=mock_fs)
