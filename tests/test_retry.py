import asyncio

import pytest

from contest_bot.services.clist_api import UpstreamQueryError
from contest_bot.services.retry import RetryingContestSource, RetryingSubscriberStore, RetryPolicy
from contest_bot.services.subscribers import StoreUnavailableError, Subscriber
from fakes import CF_900, NOW

NO_WAIT = RetryPolicy(attempts=3, min_wait=0, max_wait=0)


class FlakySource:
    def __init__(self, failures, error=None):
        self.failures = failures
        self.error = error or UpstreamQueryError("temporary")
        self.calls = 0

    async def get_contests_starting_between(self, start, end):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return [CF_900]


class FlakyStore:
    def __init__(self, failures):
        self.failures = failures
        self.calls = 0

    def list_users(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise StoreUnavailableError("db down")
        return [Subscriber(user_id="1")]


def test_source_recovers_within_attempts():
    flaky = FlakySource(failures=2)
    contests = asyncio.run(RetryingContestSource(flaky, NO_WAIT).get_contests_starting_between(NOW, NOW))
    assert contests == [CF_900]
    assert flaky.calls == 3


def test_source_gives_up_with_last_error():
    flaky = FlakySource(failures=5)
    with pytest.raises(UpstreamQueryError):
        asyncio.run(RetryingContestSource(flaky, NO_WAIT).get_contests_starting_between(NOW, NOW))
    assert flaky.calls == 3


def test_unrelated_errors_are_not_retried():
    flaky = FlakySource(failures=5, error=KeyError("bug"))
    with pytest.raises(KeyError):
        asyncio.run(RetryingContestSource(flaky, NO_WAIT).get_contests_starting_between(NOW, NOW))
    assert flaky.calls == 1


def test_store_retries_until_available():
    flaky = FlakyStore(failures=1)
    assert RetryingSubscriberStore(flaky, NO_WAIT).list_users() == [Subscriber(user_id="1")]
    assert flaky.calls == 2


def test_single_attempt_policy_does_not_retry():
    flaky = FlakyStore(failures=1)
    with pytest.raises(StoreUnavailableError):
        RetryingSubscriberStore(flaky, RetryPolicy(attempts=1, min_wait=0, max_wait=0)).list_users()
    assert flaky.calls == 1
