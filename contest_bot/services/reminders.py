"""Reminder generation: fetch contests in a window and render them."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, List, Optional, Protocol

from .clist_api import Contest, UpstreamQueryError
from .durations import format_duration
from .formatter import render

logger = logging.getLogger(__name__)

DAILY_HEADER = "Contests in the next 24 hours:"
DAILY_WINDOW = timedelta(hours=24)


class ContestSource(Protocol):
    async def get_contests_starting_between(self, start: datetime, end: datetime) -> List[Contest]:
        ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReminderPipeline:
    """Builds reminder messages from a contest source.

    ``clock`` is read once per message so the requested window is exactly
    ``[now, now + duration]``.
    """

    def __init__(
        self,
        source: ContestSource,
        clock: Callable[[], datetime] = utc_now,
        display_tz: Optional[tzinfo] = None,
    ) -> None:
        self.source = source
        self.clock = clock
        self.display_tz = display_tz

    async def generate_daily_reminder(self) -> str:
        """Reminder for contests starting in the next 24 hours."""
        start = self.clock()
        return await self._generate(start, start + DAILY_WINDOW, DAILY_HEADER)

    async def generate_windowed_reminder(self, duration: timedelta) -> str:
        """Reminder for contests starting within ``duration`` from now."""
        if not isinstance(duration, timedelta):
            raise TypeError(f"duration must be a timedelta, got {type(duration).__name__}")
        start = self.clock()
        header = f"Contests starting within {format_duration(duration)}:"
        return await self._generate(start, start + duration, header)

    async def _generate(self, start: datetime, end: datetime, header: str) -> str:
        try:
            contests = await self.source.get_contests_starting_between(start, end)
        except UpstreamQueryError as exc:
            logger.error(
                "Could not fetch contests starting between %s and %s: %s",
                start.isoformat(),
                end.isoformat(),
                exc,
            )
            raise
        logger.debug("Fetched %d contests for window %s - %s", len(contests), start, end)
        return render(header, contests, tz=self.display_tz)
