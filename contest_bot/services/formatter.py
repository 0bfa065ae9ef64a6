"""Plain-text rendering of contest reminders."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Iterable, Optional

from .clist_api import Contest

EMPTY_LINE = "0 contest found"


def format_start(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """Format a start time as e.g. ``Jan 1 10:00 UTC``."""
    if tz is not None:
        value = value.astimezone(tz)
    return f"{value:%b} {value.day} {value:%H:%M} {value.tzname() or ''}".rstrip()


def render(header: str, contests: Iterable[Contest], tz: Optional[tzinfo] = None) -> str:
    """Build the reminder text: the header line, then one line per contest."""
    lines = [f"{header}\n"]
    for contest in contests:
        lines.append(
            f"- {contest.name}. Starts at {format_start(contest.start_date, tz)}. Link: {contest.link}\n"
        )
    if len(lines) == 1:
        lines.append(EMPTY_LINE)
    return "".join(lines)
