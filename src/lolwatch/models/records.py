"""Rows persisted by a repository."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from lolwatch.models._base import RecordModel, utcnow
from lolwatch.models.game import ActiveGameInfo, MatchResult


class NewActiveGame(RecordModel):
    """Insert payload for :class:`ActiveGame`."""

    summoner_id: UUID
    game_id: int
    champion_id: int = 0
    game_mode: str = "UNKNOWN"
    queue_id: int | None = None
    game_start_time: datetime

    @classmethod
    def from_game(cls, summoner_id: UUID, game: ActiveGameInfo) -> NewActiveGame:
        return cls(
            summoner_id=summoner_id,
            game_id=game.game_id,
            champion_id=game.champion_id,
            game_mode=game.game_mode,
            queue_id=game.queue_id,
            # Spectator reports 0 while the game is loading.
            game_start_time=game.game_start_time or utcnow(),
        )


class ActiveGame(NewActiveGame):
    """A game lolwatch currently believes a summoner is playing.

    At most one exists per summoner; the tracker deletes it before it
    records the finished match.
    """

    id: UUID
    created_at: datetime


class NewMatchResult(RecordModel):
    """Insert payload for :class:`MatchHistory`."""

    summoner_id: UUID
    match_id: str
    game_id: int
    win: bool
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    champion_id: int = 0
    champion_name: str = ""
    game_duration_secs: int = 0
    game_mode: str = ""
    queue_id: int | None = None
    role: str = ""
    total_cs: int = 0
    total_gold: int = 0
    total_damage: int = 0
    enemy_champion_name: str | None = None
    enemy_cs: int | None = None
    enemy_gold: int | None = None
    enemy_damage: int | None = None
    finished_at: datetime | None = None

    @classmethod
    def from_result(cls, summoner_id: UUID, result: MatchResult) -> NewMatchResult:
        return cls(summoner_id=summoner_id, **result.model_dump())


class MatchHistory(NewMatchResult):
    """A finished match, unique per ``(summoner_id, match_id)``. Never mutated."""

    id: UUID
    created_at: datetime


class Champion(RecordModel):
    champion_id: int
    champion_name: str
