"""Sending reminder messages to one chat or to every subscriber."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List

from telegram.error import TelegramError

from .subscribers import Subscriber

logger = logging.getLogger(__name__)


class DeliveryError(RuntimeError):
    """A message could not be delivered to one recipient."""

    def __init__(self, address: str, cause: Exception):
        super().__init__(f"Could not deliver to {address}: {cause}")
        self.address = address
        self.cause = cause


@dataclass(slots=True)
class BroadcastReport:
    """Outcome of one broadcast, per recipient."""

    delivered: List[str] = field(default_factory=list)
    failures: List[DeliveryError] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.delivered) + len(self.failures)


class DeliveryDispatcher:
    """Delivers texts through the Telegram bot API.

    ``bot`` only needs an async ``send_message(chat_id=..., text=...)``.
    """

    def __init__(self, bot: Any) -> None:
        self.bot = bot

    async def reply(self, chat: Any, *texts: str) -> bool:
        """Answer a single inbound event. Failures are logged, never raised."""
        for text in texts:
            try:
                await chat.send_message(text)
            except TelegramError as exc:
                logger.error("Error replying to chat %s: %s", getattr(chat, "id", "?"), exc)
                return False
        return True

    async def broadcast(self, text: str, subscribers: Iterable[Subscriber]) -> BroadcastReport:
        """Send ``text`` to each subscriber; one failure does not stop the rest."""
        report = BroadcastReport()
        for subscriber in subscribers:
            address = subscriber.address
            try:
                await self.bot.send_message(chat_id=address, text=text)
            except TelegramError as exc:
                error = DeliveryError(address, exc)
                logger.warning("[CRON] Error sending message to [%s]: %s", address, exc)
                report.failures.append(error)
                continue
            report.delivered.append(address)
        return report
