"""
Data models for Focus Insights.

PURPOSE: Type-safe dataclasses representing core domain entities.
AI CONTEXT: These models define the snapshot schema the engine consumes.

MODEL HIERARCHY:
- Session: One completed focus interval, tagged with a Category
- Category: User-defined or default tag sessions are grouped by
- DateRange / SessionFilter: Value objects describing list criteria

IMMUTABILITY:
Sessions and categories are frozen. An edit replaces the whole object, so
the engine can share references freely and never has to defend against
mutation of its inputs.

SERIALIZATION:
All models have to_dict() for JSON persistence and from_dict() for loading.
from_dict() also accepts the camelCase keys written by the mobile client.
Timestamps use ISO 8601 strings.

USAGE:
    session = Session.create("Deep work", "work", 45 * 60 * 1000,
                             "2026-10-17T09:00:00Z", "2026-10-17T09:45:00Z")
    criteria = SessionFilter(category_id="work", search_query="deep")
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from .config import Config

__all__ = [
    "Session",
    "Category",
    "DateRange",
    "SessionFilter",
    "DEFAULT_CATEGORIES",
]


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, supporting snake_case and camelCase input."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_duration_ms(value: Any) -> int:
    """Coerce a stored duration to a non-negative int; garbage becomes 0."""
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class Session:
    """
    One tracked focus interval.

    INVARIANTS:
    - started_at <= ended_at (not re-checked by the engine)
    - duration_ms ~= ended_at - started_at (stored value is trusted)
    - category_id may dangle once its category is deleted

    created_at / updated_at are bookkeeping only; analytics never read them.
    """

    id: str
    title: str
    category_id: str
    duration_ms: int
    started_at: str
    ended_at: str
    notes: str | None = None
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            object.__setattr__(self, "title", Config.DEFAULT_SESSION_TITLE)
        if self.duration_ms < 0:
            object.__setattr__(self, "duration_ms", 0)

    @classmethod
    def create(
        cls,
        title: str,
        category_id: str,
        duration_ms: int,
        started_at: str,
        ended_at: str,
        notes: str | None = None,
        session_id: str | None = None,
    ) -> Session:
        """
        Factory method to create a session with a generated ID.

        Bookkeeping timestamps default to ended_at, the moment the session
        was saved by the timer.

        Args:
            title: Display title; blank becomes "Untitled Session".
            category_id: Category the session belongs to.
            duration_ms: Tracked duration in milliseconds.
            started_at: ISO 8601 start timestamp.
            ended_at: ISO 8601 end timestamp.
            notes: Optional free-form notes.
            session_id: Explicit identifier; a UUID4 hex is generated if None.

        Returns:
            New Session instance.

        Example:
            >>> s = Session.create('', 'work', 60000, '2026-10-17T09:00:00Z',
            ...                    '2026-10-17T09:01:00Z')
            >>> s.title
            'Untitled Session'
        """
        return cls(
            id=session_id or uuid.uuid4().hex,
            title=title,
            category_id=category_id,
            duration_ms=duration_ms,
            started_at=started_at,
            ended_at=ended_at,
            notes=notes,
            created_at=ended_at,
            updated_at=ended_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize session to dictionary for JSON storage.

        Returns:
            Dict with snake_case keys matching the snapshot schema.
        """
        return {
            "id": self.id,
            "title": self.title,
            "category_id": self.category_id,
            "duration_ms": self.duration_ms,
            "notes": self.notes,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        """
        Deserialize session from dictionary.

        Reconstructs a Session from a stored record, accepting both the
        snake_case schema and the camelCase keys used by the mobile client
        (categoryId, durationMs, startedAt, ...).

        Business context: Snapshots are exported by devices running
        different client versions; tolerant loading keeps old exports
        usable without a migration step.

        Args:
            data: Session record as stored by to_dict() or the client.

        Returns:
            Session instance. Missing optional fields get empty defaults and
            an unusable duration becomes 0.

        Raises:
            KeyError: If the required 'id' field is missing.

        Example:
            >>> Session.from_dict({'id': 's1', 'title': 'Read',
            ...                    'categoryId': 'study', 'durationMs': 60000,
            ...                    'startedAt': '2026-10-17T09:00:00Z',
            ...                    'endedAt': '2026-10-17T09:01:00Z'}).category_id
            'study'
        """
        return cls(
            id=str(data["id"]),
            title=str(_pick(data, "title", default="")),
            category_id=str(_pick(data, "category_id", "categoryId", default="")),
            duration_ms=_as_duration_ms(_pick(data, "duration_ms", "durationMs", default=0)),
            started_at=str(_pick(data, "started_at", "startedAt", default="")),
            ended_at=str(_pick(data, "ended_at", "endedAt", default="")),
            notes=_pick(data, "notes"),
            created_at=str(_pick(data, "created_at", "createdAt", default="")),
            updated_at=str(_pick(data, "updated_at", "updatedAt", default="")),
        )


@dataclass(frozen=True)
class Category:
    """
    Tag that sessions are grouped by.

    Default categories cannot be deleted; that policy is enforced by the
    client, the engine only carries the flag. `color` is an opaque hex
    string passed through to the UI.
    """

    id: str
    name: str
    color: str
    icon: str
    is_default: bool = False
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize category to dictionary for JSON storage."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "is_default": self.is_default,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Category:
        """
        Deserialize category from dictionary.

        Args:
            data: Category record; accepts isDefault / createdAt aliases.

        Returns:
            Category instance.

        Raises:
            KeyError: If the required 'id' field is missing.
        """
        return cls(
            id=str(data["id"]),
            name=str(_pick(data, "name", default="")),
            color=str(_pick(data, "color", default="")),
            icon=str(_pick(data, "icon", default="")),
            is_default=bool(_pick(data, "is_default", "isDefault", default=False)),
            created_at=str(_pick(data, "created_at", "createdAt", default="")),
        )


@dataclass(frozen=True)
class DateRange:
    """Inclusive ISO 8601 bounds applied to a session's start timestamp."""

    start: str
    end: str

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class SessionFilter:
    """
    Criteria for narrowing a session list.

    A field left as None (or a blank search query) places no constraint on
    that axis. Frozen and hashable so it can key memoization caches.
    """

    category_id: str | None = None
    date_range: DateRange | None = None
    search_query: str | None = None

    @property
    def is_empty(self) -> bool:
        """
        True when no criterion is active.

        Business context: The home screen shows the unfiltered recent list
        and hides the "clear filters" chip when this is True.
        """
        return not (
            self.category_id
            or self.date_range
            or (self.search_query and self.search_query.strip())
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "category_id": self.category_id,
            "date_range": self.date_range.to_dict() if self.date_range else None,
            "search_query": self.search_query,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionFilter:
        """Deserialize filter criteria; accepts camelCase aliases."""
        raw_range = _pick(data, "date_range", "dateRange")
        date_range = None
        if isinstance(raw_range, dict) and "start" in raw_range and "end" in raw_range:
            date_range = DateRange(start=str(raw_range["start"]), end=str(raw_range["end"]))
        return cls(
            category_id=_pick(data, "category_id", "categoryId"),
            date_range=date_range,
            search_query=_pick(data, "search_query", "searchQuery"),
        )


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="work", name="Work", color="#38BDF8", icon="briefcase", is_default=True),
    Category(id="study", name="Study", color="#34D399", icon="school", is_default=True),
    Category(id="habits", name="Habits", color="#A78BFA", icon="checkbox", is_default=True),
    Category(id="fitness", name="Fitness", color="#FB923C", icon="fitness", is_default=True),
    Category(id="general", name="General", color="#67E8F9", icon="apps", is_default=True),
)
"""Categories shipped with the app, used when no category snapshot exists."""
