from datetime import timedelta

import pytest

from contest_bot.services.durations import ValidationError, format_duration, parse_duration


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2h30m", timedelta(hours=2, minutes=30)),
        ("1.5h", timedelta(hours=1, minutes=30)),
        ("45s", timedelta(seconds=45)),
        ("300ms", timedelta(milliseconds=300)),
        ("0", timedelta(0)),
        ("-1h", timedelta(hours=-1)),
        ("1h1m1s", timedelta(hours=1, minutes=1, seconds=1)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["banana", "", "5", "h", "2 h", "1d", "3hours"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(ValidationError) as info:
        parse_duration(text)
    assert str(info.value) == f"{text} is not a valid duration"
    assert info.value.value == text


def test_format_duration():
    assert format_duration(timedelta(hours=2, minutes=30)) == "2h30m0s"
    assert format_duration(timedelta(hours=24)) == "24h0m0s"
    assert format_duration(timedelta(minutes=5, seconds=1.5)) == "5m1.5s"
    assert format_duration(timedelta(seconds=45)) == "45s"
    assert format_duration(timedelta(milliseconds=300)) == "300ms"
    assert format_duration(timedelta(0)) == "0s"
    assert format_duration(timedelta(hours=-1)) == "-1h0m0s"


def test_parse_duration_upper_bound():
    assert parse_duration("2562047h") == timedelta(hours=2562047)
    for text in ("2562048h", "100000000h", "-100000000h"):
        with pytest.raises(ValidationError):
            parse_duration(text)
