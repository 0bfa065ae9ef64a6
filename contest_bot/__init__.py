"""Telegram bot that reminds chats about upcoming programming contests."""

from .config import BotConfig
from .main import build_application

__all__ = ["BotConfig", "build_application"]
