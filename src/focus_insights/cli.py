"""
CLI entry point for Focus Insights.

PURPOSE: Command-line access to reports, session lists, export/import and
the web dashboard.
AI CONTEXT: Every subcommand is a thin run_* wrapper over a presenter.

USAGE:
    # Print today's report and this week's summary (default)
    python -m focus_insights

    # Or via CLI command (after install)
    focus-insights report --range month
    focus-insights sessions --category work --search draft
    focus-insights export --format json --output backup.json
    focus-insights import sessions.csv
    focus-insights dashboard --port 8080
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .filesystem import FileSystem
    from .statistics import StatisticsEngine
    from .storage import SessionRepository

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
RANGE_CHOICES = ("week", "month", "year")
EXPORT_FORMATS = ("csv", "json")


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger (cached for thread safety)."""
    logging.basicConfig(level=logging.INFO)
    return logging.getLogger(__name__)


def _log(message: str, *, emoji: str = "") -> None:
    """Log message with optional emoji prefix for CLI output.

    Args:
        message: The message to log.
        emoji: Optional emoji prefix for visual CLI feedback.
    """
    prefix = f"{emoji} " if emoji else ""
    _get_logger().info(f"{prefix}{message}")


def _parse_now(value: str) -> datetime:
    """argparse type for --now: an ISO 8601 timestamp."""
    from .timeutils import parse_timestamp

    parsed = parse_timestamp(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid ISO 8601 timestamp: {value!r}")
    return parsed


def _current_time(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now().astimezone()


def _repository(repository: SessionRepository | None, data_dir: str | None) -> SessionRepository:
    from .storage import SessionRepository as Repository

    return repository or Repository(data_dir=data_dir)


def run_dashboard(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    data_dir: str | None = None,
) -> None:
    """
    Launch the web dashboard.

    Args:
        host: Network interface to bind to. Default '127.0.0.1'.
        port: Listening port. Default 8000.
        data_dir: Snapshot directory. None keeps the configured one.

    Returns:
        None. Blocks until interrupted.

    Raises:
        OSError: If the port cannot be bound.

    Example:
        >>> run_dashboard(port=3000)
        🚀 Starting dashboard at http://127.0.0.1:3000
    """
    from .web import run_dashboard as start_web

    _log(f"Starting dashboard at http://{host}:{port}", emoji="🚀")
    _log("Press Ctrl+C to stop")
    start_web(host=host, port=port, data_dir=data_dir)


def run_report(
    time_range: str = "week",
    now: datetime | None = None,
    repository: SessionRepository | None = None,
    engine: StatisticsEngine | None = None,
    data_dir: str | None = None,
) -> None:
    """
    Print the text report to stdout.

    Business context: A quick terminal summary for people who prefer not
    to open the app; also works from cron with output piped to mail.

    Args:
        time_range: "week", "month" or "year" for the range section.
        now: Reference instant. Default: current local time.
        repository: Optional SessionRepository for testability.
        engine: Optional StatisticsEngine for testability.
        data_dir: Snapshot directory when no repository is given.

    Example:
        >>> run_report('month')
        ==================================================
        FOCUS INSIGHTS - SESSION REPORT
        ...
    """
    from .presenters import DashboardPresenter

    presenter = DashboardPresenter(_repository(repository, data_dir), engine)
    report = presenter.get_report(time_range, _current_time(now))  # type: ignore[arg-type]
    # print() keeps stdout clean for piping
    print(report)


def run_sessions(
    category: str | None = None,
    search: str | None = None,
    pages: int = 1,
    repository: SessionRepository | None = None,
    data_dir: str | None = None,
) -> None:
    """
    Print the filtered session list, newest first.

    Args:
        category: Exact category id filter.
        search: Case-insensitive title/notes filter.
        pages: Number of pages (of Config.PAGE_SIZE) to print.
        repository: Optional SessionRepository for testability.
        data_dir: Snapshot directory when no repository is given.
    """
    from .models import SessionFilter
    from .presenters import SessionListPresenter

    presenter = SessionListPresenter(_repository(repository, data_dir))
    presenter.set_filter(SessionFilter(category_id=category, search_query=search))
    for _ in range(max(0, pages - 1)):
        if not presenter.load_more():
            break

    page = presenter.get_page()
    if not page.items:
        print("No sessions found")
        return
    for item in page.items:
        print(
            f"{item.start_time_display}  {item.duration_display:>8}  "
            f"{item.category_name:<12}  {item.title}"
        )
    shown = len(page.items)
    footer = f"Showing {shown} of {page.total_count} sessions"
    if page.has_more:
        footer += f" (use --pages {page.current_page + 2} for more)"
    print(footer)


def run_export(
    fmt: str = "csv",
    output: str | None = None,
    now: datetime | None = None,
    repository: SessionRepository | None = None,
    filesystem: FileSystem | None = None,
    data_dir: str | None = None,
) -> None:
    """
    Export the session snapshot as CSV or JSON.

    Args:
        fmt: "csv" or "json".
        output: Destination file path. None prints to stdout.
        now: Reference instant whose zone CSV times are written in.
            Default: current local time.
        repository: Optional SessionRepository for testability.
        filesystem: Optional FileSystem for testability.
        data_dir: Snapshot directory when no repository is given.

    Raises:
        ValueError: If fmt is not a supported format.
    """
    from .export import sessions_to_csv, sessions_to_json
    from .filesystem import RealFileSystem

    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt!r}")

    repo = _repository(repository, data_dir)
    sessions = repo.list_sessions()
    categories = repo.list_categories()
    content = (
        sessions_to_csv(sessions, categories, _current_time(now))
        if fmt == "csv"
        else sessions_to_json(sessions, categories)
    )

    if output is None:
        print(content)
        return
    fs = filesystem or RealFileSystem()
    fs.write_text(output, content)
    _log(f"Exported {len(sessions)} sessions to {output}", emoji="💾")


def run_import(
    path: str,
    now: datetime | None = None,
    repository: SessionRepository | None = None,
    filesystem: FileSystem | None = None,
    data_dir: str | None = None,
) -> int:
    """
    Import sessions from a CSV file into the snapshot.

    The file is checked with validate_csv_content() first; an invalid file
    imports nothing. Each imported session is then checked with
    validate_session() and invalid ones are skipped with a warning.

    Args:
        path: CSV file in the export layout.
        now: Reference instant for fallback timestamps and future checks.
        repository: Optional SessionRepository for testability.
        filesystem: Optional FileSystem for testability.
        data_dir: Snapshot directory when no repository is given.

    Returns:
        0 on success, 1 if the file could not be read, was invalid, or the
        snapshot could not be saved.
    """
    from .export import sessions_from_csv, validate_csv_content
    from .filesystem import RealFileSystem
    from .validation import validate_session

    fs = filesystem or RealFileSystem()
    try:
        text = fs.read_text(path)
    except OSError as e:
        _log(f"Cannot read {path}: {e}", emoji="❌")
        return 1

    check = validate_csv_content(text)
    if not check.is_valid:
        for error in check.errors:
            _log(error, emoji="❌")
        return 1

    reference = _current_time(now)
    repo = _repository(repository, data_dir)
    imported = []
    for session in sessions_from_csv(text, reference, repo.list_categories()):
        result = validate_session(session, reference)
        if result.is_valid:
            imported.append(session)
        else:
            _log(f"Skipping '{session.title}': {'; '.join(result.errors)}", emoji="⚠️")

    if not repo.save_sessions(repo.list_sessions() + imported):
        _log("Failed to save imported sessions", emoji="❌")
        return 1
    _log(f"Imported {len(imported)} of {check.row_count} sessions", emoji="✅")
    return 0


def main() -> int:
    """
    Main CLI entry point for Focus Insights.

    Parses command-line arguments and dispatches to the subcommand
    handler. Without a subcommand the weekly report is printed.

    Subcommands:
    - report [--range R] [--now TS]: Print text report
    - sessions [--category ID] [--search TEXT] [--pages N]: List sessions
    - export [--format csv|json] [--output PATH]: Export snapshot
    - import PATH [--now TS]: Import sessions from CSV
    - dashboard [--host HOST] [--port PORT]: Launch web dashboard

    Returns:
        Exit code: 0 for success, 1 when an import fails.

    Raises:
        SystemExit: On --help or argument parsing errors.

    Example:
        >>> # focus-insights report --range month
        >>> sys.exit(main())
    """
    from .__version__ import __version__

    parser = argparse.ArgumentParser(
        prog="focus-insights",
        description="Focus Insights - Session analytics for focus and habit tracking",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Snapshot directory (default: $FOCUS_INSIGHTS_DATA_DIR or .focus_insights)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Report command
    report_parser = subparsers.add_parser("report", help="Print summary report (default)")
    report_parser.add_argument("--range", dest="time_range", choices=RANGE_CHOICES, default="week")
    report_parser.add_argument("--now", type=_parse_now, default=None, help="Reference time (ISO 8601)")

    # Sessions command
    sessions_parser = subparsers.add_parser("sessions", help="List sessions, newest first")
    sessions_parser.add_argument("--category", default=None, help="Category id to keep")
    sessions_parser.add_argument("--search", default=None, help="Text to find in title or notes")
    sessions_parser.add_argument("--pages", type=int, default=1, help="Pages to show (default: 1)")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export sessions as CSV or JSON")
    export_parser.add_argument("--format", dest="fmt", choices=EXPORT_FORMATS, default="csv")
    export_parser.add_argument("--output", default=None, help="File to write (default: stdout)")

    # Import command
    import_parser = subparsers.add_parser("import", help="Import sessions from a CSV file")
    import_parser.add_argument("path", help="CSV file in the export layout")
    import_parser.add_argument("--now", type=_parse_now, default=None, help="Reference time (ISO 8601)")

    # Dashboard command
    dashboard_parser = subparsers.add_parser("dashboard", help="Launch web dashboard")
    dashboard_parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Bind address (default: {DEFAULT_HOST})",
    )
    dashboard_parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port number (default: {DEFAULT_PORT})",
    )

    args = parser.parse_args()

    if args.command == "dashboard":
        run_dashboard(host=args.host, port=args.port, data_dir=args.data_dir)
    elif args.command == "sessions":
        run_sessions(
            category=args.category,
            search=args.search,
            pages=args.pages,
            data_dir=args.data_dir,
        )
    elif args.command == "export":
        run_export(fmt=args.fmt, output=args.output, data_dir=args.data_dir)
    elif args.command == "import":
        return run_import(args.path, now=args.now, data_dir=args.data_dir)
    elif args.command == "report":
        run_report(time_range=args.time_range, now=args.now, data_dir=args.data_dir)
    else:
        # Default: weekly report at the current time
        run_report(data_dir=args.data_dir)

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
