"""High-level async client for the Riot Games API."""

from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import quote

import aiohttp

from lolwatch._constants import DDRAGON_BASE, DDRAGON_FALLBACK_VERSION
from lolwatch._transport import RiotTransport, Transport
from lolwatch.config import WatchConfig
from lolwatch.exceptions import LolWatchError, RiotAccountNotFoundError, SourceError
from lolwatch.models.game import ActiveGameInfo, MatchResult
from lolwatch.models.records import Champion
from lolwatch.models.summoner import SummonerInfo
from lolwatch.riot.routing import (
    match_id_for_game,
    platform_base_url,
    platform_for_region,
    regional_base_url,
)

_logger = logging.getLogger(__name__)


class SourceClient(Protocol):
    """Read-only view of the upstream game service used by the tracker.

    Not-found is ``None``; every other failure raises :class:`SourceError`.
    """

    async def get_account_by_riot_id(self, game_name: str, tag_line: str) -> SummonerInfo: ...

    async def get_active_game(self, puuid: str) -> ActiveGameInfo | None: ...

    async def get_match_result(self, match_id: str, puuid: str) -> MatchResult | None: ...

    async def get_recent_match_id(self, puuid: str) -> str | None: ...

    async def get_all_champions(self) -> list[Champion]: ...

    def match_id_for_game(self, game_id: int) -> str: ...


class RiotClient:
    """Async client for the subset of the Riot API lolwatch needs.

    Usage::

        async with RiotClient(config) as client:
            account = await client.get_account_by_riot_id("Faker", "KR1")
            game = await client.get_active_game(account.puuid)
    """

    def __init__(
        self,
        config: WatchConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        self._platform = platform_for_region(config.default_region)
        self._platform_url = platform_base_url(config.default_region)
        self._regional_url = regional_base_url(config.default_region)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RiotClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = RiotTransport(
                self._config.riot_api_key,
                self._http_session,
                timeout=self._config.request_timeout,
            )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise LolWatchError("Client not initialized. Use 'async with RiotClient(...) as client:'")
        return self._transport

    @property
    def platform(self) -> str:
        return self._platform

    # ------------------------------------------------------------------
    # Accounts and games
    # ------------------------------------------------------------------

    async def get_account_by_riot_id(self, game_name: str, tag_line: str) -> SummonerInfo:
        """Resolve ``game_name#tag_line`` to an account.

        Raises
        ------
        RiotAccountNotFoundError
            If no such account exists.
        SourceError
            On any other API failure.
        """
        transport = self._require_transport()
        endpoint = f"/riot/account/v1/accounts/by-riot-id/{quote(game_name, safe='')}/{quote(tag_line, safe='')}"
        payload = await transport.get_json(self._regional_url, endpoint)
        if payload is None:
            raise RiotAccountNotFoundError(
                f"Riot account not found: {game_name}#{tag_line}",
                status_code=404,
                endpoint=endpoint,
            )
        return SummonerInfo.model_validate(payload)

    async def get_active_game(self, puuid: str) -> ActiveGameInfo | None:
        """Return the game *puuid* is playing, or ``None`` when not in game."""
        transport = self._require_transport()
        payload = await transport.get_json(
            self._platform_url,
            f"/lol/spectator/v5/active-games/by-summoner/{puuid}",
        )
        if payload is None:
            return None
        return ActiveGameInfo.from_api(payload, puuid)

    async def get_match_result(self, match_id: str, puuid: str) -> MatchResult | None:
        """Return *puuid*'s result in *match_id*.

        ``None`` while the match is not published yet, or if *puuid* did
        not take part in it.
        """
        transport = self._require_transport()
        payload = await transport.get_json(self._regional_url, f"/lol/match/v5/matches/{match_id}")
        if payload is None:
            return None
        result = MatchResult.from_api(payload, puuid)
        if result is None:
            _logger.warning("Match %s has no participant %s", match_id, puuid)
            return None
        if not result.match_id:
            result = result.model_copy(update={"match_id": match_id})
        return result

    async def get_recent_match_id(self, puuid: str) -> str | None:
        transport = self._require_transport()
        payload = await transport.get_json(
            self._regional_url,
            f"/lol/match/v5/matches/by-puuid/{puuid}/ids",
            params={"start": 0, "count": 1},
        )
        if not payload:
            return None
        if not isinstance(payload, list):
            raise SourceError(f"Unexpected match id listing: {payload!r}", endpoint="match-v5 ids")
        return str(payload[0])

    def match_id_for_game(self, game_id: int) -> str:
        return match_id_for_game(self._platform, game_id)

    # ------------------------------------------------------------------
    # Static data
    # ------------------------------------------------------------------

    async def _latest_ddragon_version(self) -> str:
        transport = self._require_transport()
        try:
            versions = await transport.get_json(DDRAGON_BASE, "/api/versions.json", authenticated=False)
        except SourceError:
            _logger.warning("Could not fetch Data Dragon versions, using %s", DDRAGON_FALLBACK_VERSION, exc_info=True)
            return DDRAGON_FALLBACK_VERSION
        if isinstance(versions, list) and versions:
            return str(versions[0])
        return DDRAGON_FALLBACK_VERSION

    async def get_all_champions(self) -> list[Champion]:
        """Fetch the champion id -> name table from Data Dragon."""
        transport = self._require_transport()
        version = await self._latest_ddragon_version()
        payload = await transport.get_json(
            DDRAGON_BASE,
            f"/cdn/{version}/data/en_US/champion.json",
            authenticated=False,
        )
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise SourceError(f"Unexpected champion listing for version {version}", endpoint="champion.json")

        champions: list[Champion] = []
        for entry in data.values():
            try:
                champions.append(Champion(champion_id=int(entry["key"]), champion_name=str(entry["name"])))
            except (KeyError, TypeError, ValueError):
                _logger.debug("Skipping malformed champion entry %r", entry)
        return champions
