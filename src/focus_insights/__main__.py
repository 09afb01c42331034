"""
Package entry point for python -m execution.

USAGE:
    python -m focus_insights                  # Weekly report
    python -m focus_insights report --range month
    python -m focus_insights sessions --search "deep work"
    python -m focus_insights import history.csv
    python -m focus_insights dashboard        # Launch web dashboard

The exit status of the subcommand is passed through, so a failed import
exits with 1.
"""

import sys

from focus_insights.cli import main

if __name__ == "__main__":
    sys.exit(main())
