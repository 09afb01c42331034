"""
Session export and import.

PURPOSE: Convert session snapshots to CSV/JSON for backups and
spreadsheets, and read sessions back from the CSV layout.
AI CONTEXT: Text in, text out. Writing files is the caller's job (the CLI
'export' command).

CSV LAYOUT:
    Date,Title,Category,Duration (Minutes),Start Time,End Time,Notes
Rows are newest first. Times use 'YYYY-MM-DD HH:MM:SS' wall-clock time in the
reference zone, and import reads them back in that same zone. A session
whose category no longer exists is written with the category name 'Unknown'.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from .filters import sort_by_started_desc
from .models import DEFAULT_CATEGORIES, Category, Session
from .statistics import round_half_up
from .timeutils import MS_PER_MINUTE, parse_timestamp, to_reference_zone
from .validation import ValidationResult

__all__ = [
    "CSV_HEADERS",
    "CsvValidationResult",
    "sessions_to_csv",
    "sessions_to_json",
    "sessions_from_csv",
    "validate_csv_content",
]

logger = logging.getLogger(__name__)

CSV_HEADERS = (
    "Date",
    "Title",
    "Category",
    "Duration (Minutes)",
    "Start Time",
    "End Time",
    "Notes",
)

UNKNOWN_CATEGORY_NAME = "Unknown"
IMPORT_FALLBACK_CATEGORY_ID = "general"
IMPORT_DEFAULT_TITLE = "Imported Session"


@dataclass
class CsvValidationResult(ValidationResult):
    """ValidationResult plus the number of data rows found."""

    row_count: int = 0


def _format_time(value: str, pattern: str, now: datetime) -> str:
    dt = parse_timestamp(value)
    if dt is None:
        return value
    return to_reference_zone(dt, now).strftime(pattern)


def sessions_to_csv(
    sessions: Sequence[Session],
    categories: Sequence[Category],
    now: datetime | None = None,
) -> str:
    """
    Render sessions as CSV text, newest first.

    Times are written without an offset, so they are first converted to
    the zone of `now`. sessions_from_csv() with a `now` in the same zone
    puts every session back on the same calendar day.

    Args:
        sessions: Sessions to export.
        categories: Known categories, used to print category names.
        now: Reference instant whose zone the times are written in.
            Default: current local time.

    Returns:
        CSV document with a header row and one row per session. Values
        containing commas, quotes or newlines are quoted.

    Example:
        >>> print(sessions_to_csv(sessions, categories).splitlines()[0])
        Date,Title,Category,Duration (Minutes),Start Time,End Time,Notes
    """
    reference = now if now is not None else datetime.now().astimezone()
    names = {category.id: category.name for category in categories}
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for session in sort_by_started_desc(sessions):
        writer.writerow(
            [
                _format_time(session.started_at, "%Y-%m-%d", reference),
                session.title,
                names.get(session.category_id, UNKNOWN_CATEGORY_NAME),
                round_half_up(session.duration_ms / MS_PER_MINUTE),
                _format_time(session.started_at, "%Y-%m-%d %H:%M:%S", reference),
                _format_time(session.ended_at, "%Y-%m-%d %H:%M:%S", reference),
                session.notes or "",
            ]
        )
    return buffer.getvalue()


def sessions_to_json(sessions: Sequence[Session], categories: Sequence[Category]) -> str:
    """
    Render a full backup document as indented JSON.

    The document has 'sessions' and 'categories' lists in the same record
    layout SessionRepository reads, so a backup can be dropped into a data
    directory unchanged.
    """
    document = {
        "sessions": [session.to_dict() for session in sessions],
        "categories": [category.to_dict() for category in categories],
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def _parse_duration_minutes(value: str) -> int:
    try:
        return max(0, int(float(value)))
    except (ValueError, OverflowError):
        return 0


def _to_iso(value: str, now: datetime) -> str:
    dt = parse_timestamp(value)
    if dt is None:
        return now.isoformat()
    return to_reference_zone(dt, now).isoformat()


def sessions_from_csv(
    text: str,
    now: datetime,
    categories: Sequence[Category] = DEFAULT_CATEGORIES,
) -> list[Session]:
    """
    Read sessions from CSV text in the export layout.

    Category names are matched case-insensitively against `categories`;
    unmatched names fall back to the 'general' category. Missing or
    unparsable start/end times fall back to `now`, and times without an
    offset are taken to be in `now`'s zone. A blank title becomes
    'Imported Session' and an unparsable or non-finite duration becomes 0. Blank lines are
    skipped. Each imported session gets a freshly generated id.

    Business context: Lets users move history from a spreadsheet or from
    another device's CSV export into their snapshot.

    Args:
        text: CSV document including the header row.
        now: Fallback timestamp for missing times; its zone is applied to
            offset-less times.
        categories: Categories to resolve names against.

    Returns:
        Imported sessions in file order.
    """
    ids_by_name = {category.name.lower(): category.id for category in categories}
    reader = csv.reader(io.StringIO(text))
    next(reader, None)

    sessions: list[Session] = []
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        values = list(row) + [""] * (len(CSV_HEADERS) - len(row))
        _, title, category_name, minutes, start, end, notes = values[: len(CSV_HEADERS)]
        sessions.append(
            Session.create(
                title=title.strip() or IMPORT_DEFAULT_TITLE,
                category_id=ids_by_name.get(
                    category_name.strip().lower(), IMPORT_FALLBACK_CATEGORY_ID
                ),
                duration_ms=_parse_duration_minutes(minutes) * MS_PER_MINUTE,
                started_at=_to_iso(start, now),
                ended_at=_to_iso(end, now),
                notes=notes or None,
            )
        )
    logger.info("Imported %d sessions from CSV", len(sessions))
    return sessions


def validate_csv_content(text: str) -> CsvValidationResult:
    """
    Check a CSV document's shape before importing it.

    Returns:
        Result with an error for an empty document, a header-only document,
        or each row whose column count differs from the header's. row_count
        is the number of non-blank data rows.
    """
    rows = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
    if not rows:
        return CsvValidationResult(errors=["CSV file is empty"])
    if len(rows) == 1:
        return CsvValidationResult(errors=["CSV file contains only headers, no data rows"])

    expected = len(rows[0])
    errors = [
        f"Row {index} has {len(row)} columns, expected {expected}"
        for index, row in enumerate(rows[1:], start=2)
        if len(row) != expected
    ]
    return CsvValidationResult(errors=errors, row_count=len(rows) - 1)
