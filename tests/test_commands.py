import asyncio
from datetime import timedelta
from types import SimpleNamespace

import pytest

from contest_bot.handlers.commands import (
    UPSTREAM_APOLOGY,
    Echo,
    ShowContests,
    Unrecognized,
    on_text,
    parse_command,
    parse_window,
)
from contest_bot.services.clist_api import UpstreamQueryError
from contest_bot.services.durations import ValidationError
from fakes import NOW, FakeChat


def text_update(text, chat):
    return SimpleNamespace(effective_message=SimpleNamespace(text=text), effective_chat=chat)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("/echo hello there", Echo("hello there")),
        ("@cp-bot echo  hi", Echo("hi")),
        ("/echo", Echo("")),
        ("show contests in 2h30m", ShowContests("2h30m")),
        ("please show contests in banana", ShowContests("banana")),
        ("/in 6h", ShowContests("6h")),
        ("/in@cp_reminder_bot 6h", ShowContests("6h")),
        ("@cp-bot in 1.5h", ShowContests("1.5h")),
        ("/echoes", Unrecognized("/echoes")),
        ("good morning", Unrecognized("good morning")),
    ],
)
def test_parse_command(text, expected):
    assert parse_command(text) == expected


def test_parse_window_rejects_negative_durations():
    assert parse_window("2h30m") == timedelta(hours=2.5)
    with pytest.raises(ValidationError):
        parse_window("-1h")


def test_echo_replies_verbatim(context):
    chat = FakeChat()
    asyncio.run(on_text(text_update("/echo hello there", chat), context))
    assert chat.sent == ["hello there"]


def test_show_contests_queries_requested_window(context, source):
    chat = FakeChat()
    asyncio.run(on_text(text_update("show contests in 2h30m", chat), context))

    assert source.windows == [(NOW, NOW + timedelta(hours=2.5))]
    assert chat.sent == [
        "Contests starting within 2h30m0s:\n"
        "- Codeforces Round 900. Starts at Jan 1 10:00 UTC. Link: http://cf/900\n"
    ]


def test_invalid_duration_replies_without_querying(context, source):
    chat = FakeChat()
    asyncio.run(on_text(text_update("show contests in banana", chat), context))

    assert chat.sent == ["banana is not a valid duration"]
    assert source.windows == []


def test_upstream_failure_replies_with_apology(context, source):
    source.error = UpstreamQueryError("clist is down")
    chat = FakeChat()
    asyncio.run(on_text(text_update("/in 3h", chat), context))
    assert chat.sent == [UPSTREAM_APOLOGY]


def test_unrecognized_text_is_ignored(context, source):
    chat = FakeChat()
    asyncio.run(on_text(text_update("nice weather", chat), context))
    assert chat.sent == []
    assert source.windows == []


def test_failed_reply_does_not_raise(context):
    chat = FakeChat(fail=True)
    asyncio.run(on_text(text_update("/echo hi", chat), context))


def test_huge_duration_gets_corrective_reply(context, source):
    chat = FakeChat()
    asyncio.run(on_text(text_update("show contests in 100000000h", chat), context))

    assert chat.sent == ["100000000h is not a valid duration"]
    assert source.windows == []
