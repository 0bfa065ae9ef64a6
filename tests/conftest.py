from types import SimpleNamespace

import pytest

from contest_bot.services import BotServices
from contest_bot.services.delivery import DeliveryDispatcher
from contest_bot.services.reminders import ReminderPipeline
from contest_bot.services.subscribers import init_store
from contest_bot.web import create_app
from fakes import CF_900, NOW, FakeBot, FakeSource, make_config


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def web_app(config):
    app = create_app(config)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def store(web_app):
    return init_store(web_app)


@pytest.fixture
def source():
    return FakeSource([CF_900])


@pytest.fixture
def pipeline(source):
    return ReminderPipeline(source, clock=lambda: NOW)


@pytest.fixture
def bot():
    return FakeBot()


@pytest.fixture
def services(pipeline, store, bot):
    return BotServices(
        pipeline=pipeline,
        store=store,
        dispatcher=DeliveryDispatcher(bot),
        greeting_message="Hello!",
    )


@pytest.fixture
def context(services):
    return SimpleNamespace(bot_data={"services": services})
