"""Subscribe chats when the bot joins them and unsubscribe when it leaves."""

from __future__ import annotations

import asyncio
import enum
import logging

from telegram import ChatMember, Update
from telegram.ext import ChatMemberHandler, CommandHandler, ContextTypes

from ..services import BotServices, get_services
from ..services.clist_api import UpstreamQueryError
from ..services.subscribers import StoreUnavailableError, Subscriber

logger = logging.getLogger(__name__)

_PRESENT = (ChatMember.MEMBER, ChatMember.ADMINISTRATOR, ChatMember.OWNER, ChatMember.RESTRICTED)


class MembershipChange(enum.Enum):
    JOINED = "joined"
    LEFT = "left"


def classify(old_status: str, new_status: str) -> MembershipChange | None:
    """Whether a status transition means the bot joined or left the chat."""
    was_present = old_status in _PRESENT
    is_present = new_status in _PRESENT
    if is_present and not was_present:
        return MembershipChange.JOINED
    if was_present and not is_present:
        return MembershipChange.LEFT
    return None


async def on_my_chat_member(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Bot added to / removed from a group, channel or private chat."""
    member_update = update.my_chat_member
    if not member_update:
        return

    change = classify(member_update.old_chat_member.status, member_update.new_chat_member.status)
    chat = member_update.chat
    logger.info("[EVENT][%s] chat=%s type=%s", change.value if change else "ignored", chat.id, chat.type)

    services = get_services(context)
    if change is MembershipChange.JOINED:
        await _join(chat, services)
    elif change is MembershipChange.LEFT:
        await _leave(chat, services)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """``/start`` follows the bot like a join does."""
    chat = update.effective_chat
    if not chat:
        return
    logger.info("[EVENT][%s] chat=%s type=%s", MembershipChange.JOINED.value, chat.id, chat.type)
    await _join(chat, get_services(context))


async def _join(chat, services: BotServices) -> None:
    subscriber = Subscriber.from_chat(chat)
    try:
        await asyncio.to_thread(services.store.add_user, subscriber)
    except StoreUnavailableError as exc:
        logger.error("Error AddUser %s: %s", subscriber.address, exc)

    messages = [services.greeting_message]
    try:
        messages.append(await services.pipeline.generate_daily_reminder())
    except UpstreamQueryError:
        logger.warning("Greeting %s without the initial reminder", subscriber.address)
    await services.dispatcher.reply(chat, *messages)


async def _leave(chat, services: BotServices) -> None:
    subscriber = Subscriber.from_chat(chat)
    try:
        await asyncio.to_thread(services.store.remove_user, subscriber)
    except StoreUnavailableError as exc:
        logger.error("Error RemoveUser %s: %s", subscriber.address, exc)


def build_handlers() -> list:
    """Handlers that keep the subscriber list in sync with the bot's chats."""
    return [
        CommandHandler("start", start),
        ChatMemberHandler(on_my_chat_member, ChatMemberHandler.MY_CHAT_MEMBER),
    ]
