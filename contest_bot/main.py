"""Entrypoint for the contest reminder bot service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict
from zoneinfo import ZoneInfo

import uvicorn
from asgiref.wsgi import WsgiToAsgi
from dotenv import load_dotenv
from telegram import Update
from telegram.ext import Application, ApplicationBuilder

from .config import BotConfig
from .handlers import commands, membership
from .scheduler import DailyReminderJob, build_scheduler
from .services import BotServices, ClistClient, DeliveryDispatcher, ReminderPipeline
from .services.retry import RetryingContestSource, RetryingSubscriberStore, RetryPolicy
from .services.subscribers import StoreUnavailableError, init_store
from .web import MalformedUpdateError, UpdateSubmitter, create_app, register_callback

logger = logging.getLogger(__name__)

# Bound for every outbound Telegram call, in seconds.
TELEGRAM_TIMEOUT = 5.0


def build_application(config: BotConfig, store) -> Application:
    """Construct the telegram.ext Application with all handlers."""
    app = (
        ApplicationBuilder()
        .token(config.bot_token)
        .updater(None)
        .concurrent_updates(True)
        .connect_timeout(TELEGRAM_TIMEOUT)
        .read_timeout(TELEGRAM_TIMEOUT)
        .write_timeout(TELEGRAM_TIMEOUT)
        .build()
    )

    policy = RetryPolicy(attempts=config.retry_attempts, max_wait=config.retry_max_wait)
    source = RetryingContestSource(
        ClistClient(
            api_key=config.clist_api_key,
            base_url=config.clist_base_url,
            _timeout=config.clist_timeout,
        ),
        policy,
    )
    display_tz = ZoneInfo(config.display_timezone) if config.display_timezone else None

    app.bot_data["config"] = config
    app.bot_data["services"] = BotServices(
        pipeline=ReminderPipeline(source, display_tz=display_tz),
        store=RetryingSubscriberStore(store, policy),
        dispatcher=DeliveryDispatcher(app.bot),
        greeting_message=config.greeting_message,
    )

    # Register handlers; /start must come before the free-text handler.
    for handler in membership.build_handlers():
        app.add_handler(handler)
    for handler in commands.build_handlers():
        app.add_handler(handler)

    return app


def build_update_submitter(application: Application) -> UpdateSubmitter:
    """Feed webhook payloads into the application's update queue."""

    async def submit(payload: Dict[str, Any]) -> None:
        try:
            update = Update.de_json(data=payload, bot=application.bot)
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedUpdateError(f"Not a Telegram update: {exc}") from exc
        if update is None:
            raise MalformedUpdateError("Empty Telegram update")
        await application.update_queue.put(update)

    return submit


async def serve(config: BotConfig) -> None:
    """Run the webhook server, the bot and the daily reminder in one event loop."""
    web_app = create_app(config)
    try:
        store = init_store(web_app)
    except StoreUnavailableError as exc:
        logger.critical("Error when connecting to the subscription database: %s", exc)
        raise SystemExit(1) from exc

    application = build_application(config, store)
    register_callback(web_app, config.webhook_secret, build_update_submitter(application))

    services: BotServices = application.bot_data["services"]
    job = DailyReminderJob(services.pipeline, services.store, services.dispatcher)
    scheduler = build_scheduler(config, job)

    server = uvicorn.Server(
        uvicorn.Config(
            app=WsgiToAsgi(web_app),
            host="0.0.0.0",
            port=config.port,
            use_colors=False,
            log_level=config.log_level.lower(),
        )
    )

    async with application:
        if config.webhook_url:
            await application.bot.set_webhook(
                url=f"{config.webhook_url}/callback",
                secret_token=config.webhook_secret,
                allowed_updates=Update.ALL_TYPES,
            )
            logger.info("Webhook registered at %s/callback", config.webhook_url)
        else:
            logger.info("TELEGRAM_WEBHOOK_URL not set; expecting the webhook to be registered already.")

        await application.start()
        scheduler.start()
        logger.info("Daily reminder scheduled with %r (%s)", config.cron_schedule, config.cron_timezone)
        try:
            await server.serve()
        finally:
            scheduler.shutdown(wait=False)
            await application.stop()


def main() -> None:
    """CLI hook: load config and start serving."""
    load_dotenv()
    config = BotConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    asyncio.run(serve(config))


if __name__ == "__main__":
    main()
