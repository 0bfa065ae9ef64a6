"""Reminder services shared by the handlers and the scheduled broadcast."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from telegram.ext import ContextTypes

from .clist_api import ClistClient, Contest, UpstreamQueryError
from .delivery import DeliveryDispatcher
from .reminders import ReminderPipeline


@dataclass(slots=True)
class BotServices:
    """Everything a handler needs, stored once in ``application.bot_data``."""

    pipeline: ReminderPipeline
    store: Any
    dispatcher: DeliveryDispatcher
    greeting_message: str


def get_services(context: ContextTypes.DEFAULT_TYPE) -> BotServices:
    services = context.bot_data.get("services")
    if not isinstance(services, BotServices):
        raise RuntimeError("Bot misconfigured: services missing from bot_data")
    return services


__all__ = [
    "BotServices",
    "ClistClient",
    "Contest",
    "DeliveryDispatcher",
    "ReminderPipeline",
    "UpstreamQueryError",
    "get_services",
]
