"""Daily reminder broadcast driven by a cron expression."""

from __future__ import annotations

import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import BotConfig
from .services.clist_api import UpstreamQueryError
from .services.delivery import BroadcastReport, DeliveryDispatcher
from .services.reminders import ReminderPipeline
from .services.subscribers import StoreUnavailableError

logger = logging.getLogger(__name__)

JOB_ID = "daily_reminder"


class DailyReminderJob:
    """One broadcast cycle: generate the daily reminder and push it to every subscriber.

    A trigger that fires while the previous cycle is still delivering is
    skipped rather than queued.
    """

    def __init__(self, pipeline: ReminderPipeline, store, dispatcher: DeliveryDispatcher) -> None:
        self.pipeline = pipeline
        self.store = store
        self.dispatcher = dispatcher
        self._running = asyncio.Lock()

    async def run(self) -> BroadcastReport | None:
        if self._running.locked():
            logger.warning("[CRON] Previous reminder still running, skipping this one")
            return None
        async with self._running:
            return await self._cycle()

    async def _cycle(self) -> BroadcastReport | None:
        logger.info("[CRON] Start reminder")
        try:
            message = await self.pipeline.generate_daily_reminder()
        except UpstreamQueryError as exc:
            logger.error("[CRON] Error generating message: %s", exc)
            return None

        try:
            subscribers = await asyncio.to_thread(self.store.list_users)
        except StoreUnavailableError as exc:
            logger.error("[CRON] Error getting users: %s", exc)
            return None

        report = await self.dispatcher.broadcast(message, subscribers)
        logger.info(
            "[CRON] Reminder sent to %d of %d subscribers",
            len(report.delivered),
            report.attempted,
        )
        return report


def parse_cron(expression: str, timezone: str = "UTC") -> CronTrigger:
    """Accept a standard 5-field crontab or a 6-field one with leading seconds."""
    fields = expression.split()
    if len(fields) == 5:
        return CronTrigger.from_crontab(expression, timezone=timezone)
    if len(fields) == 6:
        second, minute, hour, day, month, day_of_week = fields
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone=timezone,
        )
    raise ValueError(f"Invalid cron expression {expression!r}: expected 5 or 6 fields")


def build_scheduler(config: BotConfig, job: DailyReminderJob) -> AsyncIOScheduler:
    """Scheduler running ``job`` on ``config.cron_schedule``; not started."""
    scheduler = AsyncIOScheduler(timezone=config.cron_timezone)
    scheduler.add_job(
        job.run,
        trigger=parse_cron(config.cron_schedule, config.cron_timezone),
        id=JOB_ID,
        # DailyReminderJob.run skips and logs overlapping cycles itself.
        max_instances=2,
        coalesce=True,
    )
    return scheduler
