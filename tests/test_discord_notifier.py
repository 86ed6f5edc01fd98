from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

import aiohttp
import pytest
from conftest import FakeResponse, FakeSession, make_game

from lolwatch.exceptions import DeliveryError
from lolwatch.models import NewNotificationEvent, NotificationEvent, Summoner
from lolwatch.notification.discord import DiscordNotifier

NOW = datetime(2026, 1, 1, tzinfo=UTC)


def _summoner() -> Summoner:
    return Summoner(
        id=uuid4(),
        riot_puuid="p",
        game_name="Alpha",
        tag_line="EUW",
        region="euw1",
        created_at=NOW,
        updated_at=NOW,
    )


def _started(summoner: Summoner) -> NotificationEvent:
    new = NewNotificationEvent.game_started(summoner.id, make_game(42), "Ahri")
    return NotificationEvent(id=uuid4(), created_at=NOW, **new.model_dump())


@pytest.mark.asyncio
async def test_posts_embed_with_bot_token() -> None:
    session = FakeSession([FakeResponse(status=200, body="{}")])
    summoner = _summoner()

    async with DiscordNotifier("bot-token", 1234, session=session) as notifier:  # type: ignore[arg-type]
        await notifier.send_game_started([summoner], [_started(summoner)])

    request = session.requests[0]
    assert request["method"] == "POST"
    assert request["url"] == "https://discord.com/api/v10/channels/1234/messages"
    assert request["headers"]["Authorization"] == "Bot bot-token"
    embed = request["json"]["embeds"][0]
    assert embed["title"] == "🎮 Game Started!"
    assert embed["fields"][0] == {"name": "Alpha#EUW", "value": "Ahri", "inline": True}


@pytest.mark.asyncio
async def test_http_failure_raises_delivery_error() -> None:
    session = FakeSession([FakeResponse(status=403, body='{"message": "Missing Access"}')])
    summoner = _summoner()

    async with DiscordNotifier("bot-token", 1234, session=session) as notifier:  # type: ignore[arg-type]
        with pytest.raises(DeliveryError) as excinfo:
            await notifier.send_game_started([summoner], [_started(summoner)])

    assert excinfo.value.status_code == 403


@pytest.mark.asyncio
async def test_network_failure_raises_delivery_error() -> None:
    session = FakeSession([aiohttp.ClientConnectionError("reset")])
    summoner = _summoner()

    async with DiscordNotifier("bot-token", 1234, session=session) as notifier:  # type: ignore[arg-type]
        with pytest.raises(DeliveryError):
            await notifier.send_game_started([summoner], [_started(summoner)])


@pytest.mark.asyncio
async def test_unopened_notifier_raises_delivery_error() -> None:
    notifier = DiscordNotifier("bot-token", 1234)
    summoner = _summoner()

    with pytest.raises(DeliveryError, match="not initialized"):
        await notifier.send_game_started([summoner], [_started(summoner)])
