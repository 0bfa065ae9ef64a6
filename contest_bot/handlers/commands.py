"""Text commands: echo and on-demand contest listings."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import timedelta

from telegram import Update
from telegram.ext import ContextTypes, MessageHandler, filters

from ..services import get_services
from ..services.clist_api import UpstreamQueryError
from ..services.durations import ValidationError, parse_duration

logger = logging.getLogger(__name__)

ECHO_RE = re.compile(r"^\s*(?:/echo(?:@\w+)?|@cp-bot\s+echo)(?:\s+(.*)|\s*)$", re.IGNORECASE | re.DOTALL)
SHOW_RE = re.compile(
    r"(?:^\s*/in(?:@\w+)?|@cp-bot\s+in|\bshow\s+contests\s+in)\s+(\S+)",
    re.IGNORECASE,
)

UPSTREAM_APOLOGY = "Sorry, I could not fetch the contest list right now. Please try again later."


@dataclass(frozen=True, slots=True)
class Echo:
    text: str


@dataclass(frozen=True, slots=True)
class ShowContests:
    argument: str


@dataclass(frozen=True, slots=True)
class Unrecognized:
    text: str


Command = Echo | ShowContests | Unrecognized


def parse_command(text: str) -> Command:
    """Classify a chat message."""
    match = ECHO_RE.match(text)
    if match:
        return Echo(match.group(1) or "")
    match = SHOW_RE.search(text)
    if match:
        return ShowContests(match.group(1))
    return Unrecognized(text)


def parse_window(argument: str) -> timedelta:
    """Duration for an on-demand listing; negative windows are rejected."""
    duration = parse_duration(argument)
    if duration < timedelta(0):
        raise ValidationError(argument)
    return duration


async def on_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Dispatch a text message to the matching command."""
    message = update.effective_message
    chat = update.effective_chat
    if not message or not message.text or not chat:
        return

    logger.info("Received message from %s: %s", chat.id, message.text)
    command = parse_command(message.text)
    services = get_services(context)

    if isinstance(command, Echo):
        if command.text:
            await services.dispatcher.reply(chat, command.text)
    elif isinstance(command, ShowContests):
        await _show_contests(chat, command.argument, services)


async def _show_contests(chat, argument: str, services) -> None:
    try:
        duration = parse_window(argument)
    except ValidationError as exc:
        await services.dispatcher.reply(chat, str(exc))
        return

    try:
        reply = await services.pipeline.generate_windowed_reminder(duration)
    except UpstreamQueryError as exc:
        logger.error("Error getting contests for chat %s: %s", chat.id, exc)
        await services.dispatcher.reply(chat, UPSTREAM_APOLOGY)
        return

    await services.dispatcher.reply(chat, reply)


def build_handlers() -> list:
    """Handlers for free-text and slash commands."""
    return [MessageHandler(filters.TEXT, on_text)]
