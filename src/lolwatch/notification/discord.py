"""Notification delivery to a Discord channel."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import Any, Protocol

import aiohttp

from lolwatch._constants import DISCORD_API_BASE, USER_AGENT
from lolwatch.exceptions import DeliveryError
from lolwatch.models import NotificationEvent, Summoner
from lolwatch.notification.messages import format_grouped_game_ended, format_grouped_game_started

_logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Delivers one grouped message per call; raises :class:`DeliveryError`."""

    async def send_game_started(self, summoners: Sequence[Summoner], events: Sequence[NotificationEvent]) -> None: ...

    async def send_game_ended(self, summoners: Sequence[Summoner], events: Sequence[NotificationEvent]) -> None: ...


class DiscordNotifier:
    """Posts grouped embeds through the Discord REST API.

    Usage::

        async with DiscordNotifier(token, channel_id) as notifier:
            await notifier.send_game_started(summoners, events)
    """

    def __init__(
        self,
        bot_token: str,
        channel_id: int,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = 10.0,
        base_url: str = DISCORD_API_BASE,
    ) -> None:
        self._bot_token = bot_token
        self._channel_id = channel_id
        self._external_session = session is not None
        self._http_session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._base_url = base_url.rstrip("/")

    async def __aenter__(self) -> DiscordNotifier:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    async def send_game_started(self, summoners: Sequence[Summoner], events: Sequence[NotificationEvent]) -> None:
        await self._send_embed(format_grouped_game_started(summoners, events))

    async def send_game_ended(self, summoners: Sequence[Summoner], events: Sequence[NotificationEvent]) -> None:
        await self._send_embed(format_grouped_game_ended(summoners, events))

    async def _send_embed(self, embed: dict[str, Any]) -> None:
        if self._http_session is None:
            raise DeliveryError("Notifier not initialized. Use 'async with DiscordNotifier(...) as notifier:'")

        url = f"{self._base_url}/channels/{self._channel_id}/messages"
        headers = {
            "Authorization": f"Bot {self._bot_token}",
            "content-type": "application/json",
            "user-agent": USER_AGENT,
        }
        _logger.debug("POST %s title=%r", url, embed.get("title"))

        try:
            async with self._http_session.post(
                url,
                json={"embeds": [embed]},
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                if not 200 <= resp.status < 300:
                    text = await resp.text()
                    raise DeliveryError(
                        f"Discord responded HTTP {resp.status}: {text[:200]}",
                        status_code=resp.status,
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise DeliveryError(f"Discord request failed: {exc!r}") from exc

        _logger.info("Sent notification %r to channel %s", embed.get("title"), self._channel_id)


class LogNotifier:
    """Writes rendered embeds to the log instead of sending them (``--dry-run``)."""

    async def send_game_started(self, summoners: Sequence[Summoner], events: Sequence[NotificationEvent]) -> None:
        _logger.info("[dry-run] %s", json.dumps(format_grouped_game_started(summoners, events), ensure_ascii=False))

    async def send_game_ended(self, summoners: Sequence[Summoner], events: Sequence[NotificationEvent]) -> None:
        _logger.info("[dry-run] %s", json.dumps(format_grouped_game_ended(summoners, events), ensure_ascii=False))
