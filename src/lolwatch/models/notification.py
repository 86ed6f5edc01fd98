"""Queued notification events.

One event is written per observed transition.  The notification processor
later groups pending events that share a correlation key (the game id for
starts, the match id for ends) into a single chat message.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from lolwatch.models._base import RecordModel
from lolwatch.models.game import ActiveGameInfo, MatchResult


class EventType(StrEnum):
    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"


class NewNotificationEvent(RecordModel):
    """Insert payload for :class:`NotificationEvent`.

    Outcome and metric fields are only populated for ``GAME_ENDED``.
    """

    summoner_id: UUID
    event_type: EventType
    game_id: int
    match_id: str | None = None
    champion_id: int = 0
    champion_name: str = ""
    game_mode: str = ""
    queue_id: int | None = None
    is_featured_mode: bool = False
    win: bool | None = None
    kills: int | None = None
    deaths: int | None = None
    assists: int | None = None
    role: str | None = None
    game_duration_secs: int | None = None
    total_cs: int | None = None
    total_gold: int | None = None
    total_damage: int | None = None
    enemy_champion_name: str | None = None
    enemy_cs: int | None = None
    enemy_gold: int | None = None
    enemy_damage: int | None = None

    @classmethod
    def game_started(cls, summoner_id: UUID, game: ActiveGameInfo, champion_name: str) -> NewNotificationEvent:
        return cls(
            summoner_id=summoner_id,
            event_type=EventType.GAME_STARTED,
            game_id=game.game_id,
            champion_id=game.champion_id,
            champion_name=champion_name,
            game_mode=game.game_mode,
            queue_id=game.queue_id,
        )

    @classmethod
    def game_ended(
        cls,
        summoner_id: UUID,
        result: MatchResult,
        *,
        is_featured_mode: bool = False,
    ) -> NewNotificationEvent:
        return cls(
            summoner_id=summoner_id,
            event_type=EventType.GAME_ENDED,
            game_id=result.game_id,
            match_id=result.match_id,
            champion_id=result.champion_id,
            champion_name=result.champion_name,
            game_mode=result.game_mode,
            queue_id=result.queue_id,
            is_featured_mode=is_featured_mode,
            win=result.win,
            kills=result.kills,
            deaths=result.deaths,
            assists=result.assists,
            role=result.role,
            game_duration_secs=result.game_duration_secs,
            total_cs=result.total_cs,
            total_gold=result.total_gold,
            total_damage=result.total_damage,
            enemy_champion_name=result.enemy_champion_name,
            enemy_cs=result.enemy_cs,
            enemy_gold=result.enemy_gold,
            enemy_damage=result.enemy_damage,
        )


class NotificationEvent(NewNotificationEvent):
    """A queued event.

    Only ``processed`` and ``processed_at`` ever change, and only once.
    """

    id: UUID
    processed: bool = False
    created_at: datetime
    processed_at: datetime | None = None

    @property
    def correlation_key(self) -> str | None:
        """Grouping key: game id for starts, match id for ends."""
        if self.event_type is EventType.GAME_STARTED:
            return str(self.game_id)
        return self.match_id
