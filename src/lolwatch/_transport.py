"""HTTP transport for the Riot Games API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from lolwatch._constants import USER_AGENT
from lolwatch._redact import redact_for_log
from lolwatch.exceptions import RiotRateLimitError, SourceError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by :class:`lolwatch.riot.client.RiotClient`.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`RiotTransport`) concrete.
    """

    async def get_json(
        self,
        base_url: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any | None: ...


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class RiotTransport:
    """GET-only JSON transport that signs requests with the Riot API key.

    Status handling:

    * ``200`` -> decoded JSON
    * ``404`` -> ``None`` (resource does not exist, e.g. not in game)
    * ``429`` -> :class:`RiotRateLimitError`
    * anything else, network errors, timeouts, invalid JSON -> :class:`SourceError`
    """

    def __init__(
        self,
        api_key: str,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float = 10.0,
    ) -> None:
        self._api_key = api_key
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _headers(self, authenticated: bool) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if authenticated:
            headers["X-Riot-Token"] = self._api_key
        return headers

    async def get_json(
        self,
        base_url: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any | None:
        url = f"{base_url}{endpoint}"
        headers = self._headers(authenticated)

        _logger.debug("GET %s params=%s headers=%s", url, params, redact_for_log(headers))

        try:
            async with self._http.get(url, params=params, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status == 404:
                    return None
                if resp.status == 429:
                    raise RiotRateLimitError(
                        f"Rate limited on {endpoint}",
                        retry_after=_parse_retry_after(resp.headers.get("Retry-After")),
                        endpoint=endpoint,
                    )
                if resp.status != 200:
                    raise SourceError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except SourceError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SourceError(
                f"Request to {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise SourceError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
