import asyncio

import pytest
from telegram import Update

from contest_bot.main import build_application, build_update_submitter
from contest_bot.services import BotServices
from contest_bot.web import MalformedUpdateError


@pytest.fixture
def application(config, store):
    return build_application(config, store)


def test_build_application_wires_services(application):
    services = application.bot_data["services"]
    assert isinstance(services, BotServices)
    assert services.greeting_message == application.bot_data["config"].greeting_message


def test_submitter_queues_telegram_updates(application):
    submit = build_update_submitter(application)
    payload = {
        "update_id": 7,
        "message": {
            "message_id": 1,
            "date": 1704099600,
            "chat": {"id": 42, "type": "private"},
            "text": "show contests in 2h",
        },
    }

    asyncio.run(submit(payload))

    update = application.update_queue.get_nowait()
    assert isinstance(update, Update)
    assert update.update_id == 7
    assert update.effective_message.text == "show contests in 2h"
    assert update.effective_chat.id == 42


@pytest.mark.parametrize("payload", [{}, {"unexpected": 1}])
def test_submitter_rejects_non_updates(application, payload):
    submit = build_update_submitter(application)
    with pytest.raises(MalformedUpdateError):
        asyncio.run(submit(payload))
    assert application.update_queue.empty()
