"""Thin client for the clist.by contest listing API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List

import httpx

PAGE_LIMIT = 100
_QUERY_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


class UpstreamQueryError(RuntimeError):
    """Raised when the contest listing could not be fetched or understood."""


@dataclass(frozen=True, slots=True)
class Contest:
    """A single contest as announced by the upstream listing."""

    name: str
    start_date: datetime
    link: str


@dataclass(slots=True)
class ClistClient:
    """HTTP client used to query contests starting inside a time window."""

    api_key: str
    base_url: str = "https://clist.by/api/v4"
    _timeout: float = 5.0
    transport: httpx.AsyncBaseTransport | None = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._timeout,
            headers={"Authorization": f"ApiKey {self.api_key}"},
            transport=self.transport,
        )

    async def get_contests_starting_between(self, start: datetime, end: datetime) -> List[Contest]:
        """Return contests whose start time falls in [start, end], ordered by start."""
        params: Dict[str, Any] = {
            "start__gte": _query_time(start),
            "start__lte": _query_time(end),
            "order_by": "start",
            "limit": PAGE_LIMIT,
            "offset": 0,
        }
        contests: List[Contest] = []
        async with self._client() as client:
            while True:
                payload = await self._get(client, "/contest/", params)
                objects = payload.get("objects")
                if not isinstance(objects, list):
                    raise UpstreamQueryError("Contest listing is missing 'objects'")
                contests.extend(_parse_contest(item) for item in objects)

                meta = payload.get("meta") or {}
                if not meta.get("next") or not objects:
                    break
                params["offset"] += len(objects)
        return contests

    async def _get(self, client: httpx.AsyncClient, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamQueryError(
                f"Contest listing returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamQueryError("Network error while contacting the contest listing") from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamQueryError("Invalid JSON response from the contest listing") from exc
        if not isinstance(payload, dict):
            raise UpstreamQueryError("Unexpected contest listing payload")
        return payload


def _query_time(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(_QUERY_TIME_FORMAT)


def _parse_contest(item: Any) -> Contest:
    try:
        name = item["event"]
        link = item["href"]
        start = datetime.fromisoformat(item["start"].replace("Z", "+00:00"))
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise UpstreamQueryError(f"Malformed contest entry: {item!r}") from exc

    # The listing reports naive UTC timestamps.
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    else:
        start = start.astimezone(timezone.utc)
    return Contest(name=name, start_date=start, link=link)
