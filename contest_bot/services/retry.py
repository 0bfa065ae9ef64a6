"""Bounded retry with exponential backoff around the contest source and the store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Type

from tenacity import (
    AsyncRetrying,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .clist_api import Contest, UpstreamQueryError
from .reminders import ContestSource
from .subscribers import StoreUnavailableError, Subscriber, SubscriberStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RetryPolicy:
    """How many times and how patiently a failing call is repeated."""

    attempts: int = 3
    min_wait: float = 1.0
    max_wait: float = 5.0

    def _options(self, retry_on: Type[BaseException]) -> dict:
        return dict(
            stop=stop_after_attempt(max(self.attempts, 1)),
            wait=wait_exponential(multiplier=self.min_wait, min=self.min_wait, max=self.max_wait),
            retry=retry_if_exception_type(retry_on),
            reraise=True,
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )

    def call(self, retry_on: Type[BaseException], fn: Callable[..., Any], *args, **kwargs) -> Any:
        return Retrying(**self._options(retry_on))(fn, *args, **kwargs)

    async def call_async(self, retry_on: Type[BaseException], fn: Callable[..., Any], *args, **kwargs) -> Any:
        return await AsyncRetrying(**self._options(retry_on))(fn, *args, **kwargs)


class RetryingContestSource:
    """Contest source that repeats failed upstream queries."""

    def __init__(self, source: ContestSource, policy: RetryPolicy) -> None:
        self.source = source
        self.policy = policy

    async def get_contests_starting_between(self, start: datetime, end: datetime) -> List[Contest]:
        return await self.policy.call_async(
            UpstreamQueryError, self.source.get_contests_starting_between, start, end
        )


class RetryingSubscriberStore:
    """Subscriber store that repeats calls while the database is unreachable."""

    def __init__(self, store: SubscriberStore, policy: RetryPolicy) -> None:
        self.store = store
        self.policy = policy

    def add_user(self, subscriber: Subscriber) -> bool:
        return self.policy.call(StoreUnavailableError, self.store.add_user, subscriber)

    def remove_user(self, subscriber: Subscriber) -> bool:
        return self.policy.call(StoreUnavailableError, self.store.remove_user, subscriber)

    def list_users(self) -> List[Subscriber]:
        return self.policy.call(StoreUnavailableError, self.store.list_users)
