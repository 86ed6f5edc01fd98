from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
import pytest_asyncio

from lolwatch.exceptions import RiotAccountNotFoundError, SourceError
from lolwatch.models import ActiveGameInfo, Champion, MatchResult, Summoner, SummonerInfo
from lolwatch.storage.memory import InMemoryRepository

T0 = datetime(2026, 1, 1, 20, 0, tzinfo=UTC)


class FakeClock:
    """Callable clock tests move by hand."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)

    def set(self, seconds_after_t0: float) -> None:
        self.now = T0 + timedelta(seconds=seconds_after_t0)


@dataclass
class FakeRiotSource:
    """In-memory stand-in for the Riot API.

    ``match_results`` values may be a list, consumed one item per call;
    an exception instance in the list is raised instead of returned.
    """

    platform: str = "EUW1"
    accounts: dict[tuple[str, str], SummonerInfo] = field(default_factory=dict)
    active_games: dict[str, ActiveGameInfo] = field(default_factory=dict)
    match_results: dict[str, list[MatchResult | None | Exception]] = field(default_factory=dict)
    recent_match_ids: dict[str, str] = field(default_factory=dict)
    champions: list[Champion] = field(default_factory=list)
    active_game_error: Exception | None = None
    calls: list[str] = field(default_factory=list)

    async def get_account_by_riot_id(self, game_name: str, tag_line: str) -> SummonerInfo:
        self.calls.append(f"account:{game_name}#{tag_line}")
        try:
            return self.accounts[(game_name, tag_line)]
        except KeyError:
            raise RiotAccountNotFoundError(f"Riot account not found: {game_name}#{tag_line}", status_code=404) from None

    async def get_active_game(self, puuid: str) -> ActiveGameInfo | None:
        self.calls.append(f"active:{puuid}")
        if self.active_game_error is not None:
            raise self.active_game_error
        return self.active_games.get(puuid)

    async def get_match_result(self, match_id: str, puuid: str) -> MatchResult | None:
        self.calls.append(f"match:{match_id}")
        queue = self.match_results.get(match_id)
        if not queue:
            return None
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    async def get_recent_match_id(self, puuid: str) -> str | None:
        self.calls.append(f"recent:{puuid}")
        return self.recent_match_ids.get(puuid)

    async def get_all_champions(self) -> list[Champion]:
        if not self.champions:
            raise SourceError("Data Dragon unavailable")
        return list(self.champions)

    def match_id_for_game(self, game_id: int) -> str:
        return f"{self.platform}_{game_id}"


def make_game(
    game_id: int, champion_id: int = 103, game_mode: str = "CLASSIC", queue_id: int | None = 420
) -> ActiveGameInfo:
    return ActiveGameInfo(
        game_id=game_id,
        champion_id=champion_id,
        game_mode=game_mode,
        queue_id=queue_id,
        game_start_time=T0,
    )


def make_result(game_id: int, *, win: bool = True, match_id: str | None = None, **overrides: object) -> MatchResult:
    values: dict[str, object] = {
        "match_id": match_id or f"EUW1_{game_id}",
        "game_id": game_id,
        "win": win,
        "kills": 7,
        "deaths": 2,
        "assists": 9,
        "champion_id": 103,
        "champion_name": "Ahri",
        "game_duration_secs": 1800,
        "game_mode": "CLASSIC",
        "queue_id": 420,
        "role": "MIDDLE",
        "total_cs": 240,
        "total_gold": 13500,
        "total_damage": 28400,
        "finished_at": T0,
    }
    values.update(overrides)
    return MatchResult(**values)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository(clock: FakeClock) -> InMemoryRepository:
    return InMemoryRepository(clock=clock)


@pytest.fixture
def source() -> FakeRiotSource:
    return FakeRiotSource()


@pytest_asyncio.fixture
async def summoner(repository: InMemoryRepository) -> Summoner:
    return await repository.upsert_summoner("puuid-a", "Alpha", "EUW", "euw1")


@dataclass
class FakeResponse:
    status: int = 200
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    async def text(self) -> str:
        return self.body

    async def __aenter__(self) -> FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeSession:
    """Minimal aiohttp.ClientSession double recording requests."""

    responses: list[FakeResponse | Exception] = field(default_factory=list)
    requests: list[dict[str, Any]] = field(default_factory=list)

    def _next(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("POST", url, **kwargs)
