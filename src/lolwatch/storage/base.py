"""Repository interface shared by the tracker and the notification processor."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from lolwatch.models import (
    ActiveGame,
    Champion,
    MatchHistory,
    NewActiveGame,
    NewMatchResult,
    NewNotificationEvent,
    NotificationEvent,
    Summoner,
)


class Repository(Protocol):
    """Persistence operations lolwatch relies on.

    Implementations must be safe to call from several tasks at once.
    Every failure is raised as :class:`lolwatch.exceptions.StorageError`.
    """

    async def upsert_summoner(self, puuid: str, game_name: str, tag_line: str, region: str) -> Summoner: ...

    async def get_summoner_by_puuid(self, puuid: str) -> Summoner | None: ...

    async def get_all_summoners(self) -> list[Summoner]: ...

    async def insert_active_game(self, game: NewActiveGame) -> ActiveGame: ...

    async def get_active_games_for_summoner(self, summoner_id: UUID) -> list[ActiveGame]: ...

    async def delete_active_game_by_summoner_and_game(self, summoner_id: UUID, game_id: int) -> None: ...

    async def insert_match_result(self, result: NewMatchResult) -> MatchHistory | None:
        """Insert a finished match; ``None`` if it was already recorded."""
        ...

    async def get_match_history_by_match_id(self, summoner_id: UUID, match_id: str) -> MatchHistory | None: ...

    async def upsert_champion(self, champion_id: int, champion_name: str) -> Champion: ...

    async def get_champion_by_id(self, champion_id: int) -> Champion | None: ...

    async def insert_notification_event(self, event: NewNotificationEvent) -> NotificationEvent: ...

    async def get_pending_notification_events(self) -> list[NotificationEvent]:
        """Unprocessed events, oldest first."""
        ...

    async def mark_notifications_processed(self, event_ids: Sequence[UUID]) -> None: ...
