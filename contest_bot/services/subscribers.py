"""Persistent set of chats that receive the scheduled reminder."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List

from flask import Flask
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..models import Subscription, db

logger = logging.getLogger(__name__)

_GROUP_CHAT_TYPES = {"group", "supergroup"}


class StoreUnavailableError(RuntimeError):
    """Raised when the subscription database cannot be reached."""


@dataclass(frozen=True, slots=True)
class Subscriber:
    """A recipient of broadcasts: a private chat, a group or a channel."""

    user_id: str = ""
    group_id: str = ""
    room_id: str = ""

    def __post_init__(self) -> None:
        if sum(1 for value in (self.user_id, self.group_id, self.room_id) if value) > 1:
            raise ValueError("A subscriber has at most one of user_id, group_id, room_id")

    @property
    def address(self) -> str:
        return self.group_id or self.room_id or self.user_id

    @classmethod
    def from_chat(cls, chat: Any) -> "Subscriber":
        """Build a subscriber from a Telegram chat."""
        chat_id = str(chat.id)
        if chat.type in _GROUP_CHAT_TYPES:
            return cls(group_id=chat_id)
        if chat.type == "channel":
            return cls(room_id=chat_id)
        return cls(user_id=chat_id)


class SubscriberStore:
    """Subscriptions kept in the SQL database behind ``app``."""

    def __init__(self, app: Flask) -> None:
        self.app = app

    def add_user(self, subscriber: Subscriber) -> bool:
        """Subscribe a chat. Returns False when it was already subscribed."""
        with self.app.app_context():
            try:
                if Subscription.query.filter_by(address=subscriber.address).first():
                    return False
                db.session.add(
                    Subscription(
                        address=subscriber.address,
                        user_id=subscriber.user_id or None,
                        group_id=subscriber.group_id or None,
                        room_id=subscriber.room_id or None,
                    )
                )
                db.session.commit()
            except IntegrityError:
                # Another request subscribed the same chat first.
                db.session.rollback()
                return False
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise StoreUnavailableError(f"Could not add subscriber {subscriber.address}") from exc
        logger.info("Subscribed %s", subscriber.address)
        return True

    def remove_user(self, subscriber: Subscriber) -> bool:
        """Unsubscribe a chat. Returns False when it was not subscribed."""
        with self.app.app_context():
            try:
                deleted = Subscription.query.filter_by(address=subscriber.address).delete()
                db.session.commit()
            except SQLAlchemyError as exc:
                db.session.rollback()
                raise StoreUnavailableError(f"Could not remove subscriber {subscriber.address}") from exc
        if deleted:
            logger.info("Unsubscribed %s", subscriber.address)
        return bool(deleted)

    def list_users(self) -> List[Subscriber]:
        with self.app.app_context():
            try:
                rows = Subscription.query.order_by(Subscription.id).all()
            except SQLAlchemyError as exc:
                raise StoreUnavailableError("Could not list subscribers") from exc
            return [
                Subscriber(
                    user_id=row.user_id or "",
                    group_id=row.group_id or "",
                    room_id=row.room_id or "",
                )
                for row in rows
            ]


def init_store(app: Flask) -> SubscriberStore:
    """Create the tables and check the database answers; called once at startup."""
    with app.app_context():
        try:
            db.create_all()
            db.session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Subscription database is unreachable") from exc
    return SubscriberStore(app)
