"""In-memory repository used by tests and ``--dry-run``."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from uuid import UUID, uuid4

from lolwatch.models import (
    ActiveGame,
    Champion,
    MatchHistory,
    NewActiveGame,
    NewMatchResult,
    NewNotificationEvent,
    NotificationEvent,
    Summoner,
    utcnow,
)


class InMemoryRepository:
    """Dict-backed repository.

    No operation awaits, so each call is atomic with respect to other
    tasks on the same event loop.

    Parameters
    ----------
    clock : callable, optional
        Source of ``created_at``/``processed_at`` timestamps.
    """

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or utcnow
        self.summoners: dict[UUID, Summoner] = {}
        self.active_games: dict[UUID, ActiveGame] = {}
        self.match_history: dict[tuple[UUID, str], MatchHistory] = {}
        self.champions: dict[int, Champion] = {}
        self.events: dict[UUID, NotificationEvent] = {}

    # ------------------------------------------------------------------
    # Summoners
    # ------------------------------------------------------------------

    async def upsert_summoner(self, puuid: str, game_name: str, tag_line: str, region: str) -> Summoner:
        now = self._clock()
        existing = next((s for s in self.summoners.values() if s.riot_puuid == puuid), None)
        if existing is not None:
            summoner = existing.model_copy(update={"game_name": game_name, "tag_line": tag_line, "updated_at": now})
        else:
            summoner = Summoner(
                id=uuid4(),
                riot_puuid=puuid,
                game_name=game_name,
                tag_line=tag_line,
                region=region,
                created_at=now,
                updated_at=now,
            )
        self.summoners[summoner.id] = summoner
        return summoner

    async def get_summoner_by_puuid(self, puuid: str) -> Summoner | None:
        return next((s for s in self.summoners.values() if s.riot_puuid == puuid), None)

    async def get_all_summoners(self) -> list[Summoner]:
        return list(self.summoners.values())

    # ------------------------------------------------------------------
    # Active games
    # ------------------------------------------------------------------

    async def insert_active_game(self, game: NewActiveGame) -> ActiveGame:
        record = ActiveGame(id=uuid4(), created_at=self._clock(), **game.model_dump())
        self.active_games[record.id] = record
        return record

    async def get_active_games_for_summoner(self, summoner_id: UUID) -> list[ActiveGame]:
        return [g for g in self.active_games.values() if g.summoner_id == summoner_id]

    async def delete_active_game_by_summoner_and_game(self, summoner_id: UUID, game_id: int) -> None:
        for record_id in [
            g.id for g in self.active_games.values() if g.summoner_id == summoner_id and g.game_id == game_id
        ]:
            del self.active_games[record_id]

    # ------------------------------------------------------------------
    # Match history
    # ------------------------------------------------------------------

    async def insert_match_result(self, result: NewMatchResult) -> MatchHistory | None:
        key = (result.summoner_id, result.match_id)
        if key in self.match_history:
            return None
        record = MatchHistory(id=uuid4(), created_at=self._clock(), **result.model_dump())
        self.match_history[key] = record
        return record

    async def get_match_history_by_match_id(self, summoner_id: UUID, match_id: str) -> MatchHistory | None:
        return self.match_history.get((summoner_id, match_id))

    # ------------------------------------------------------------------
    # Champions
    # ------------------------------------------------------------------

    async def upsert_champion(self, champion_id: int, champion_name: str) -> Champion:
        champion = Champion(champion_id=champion_id, champion_name=champion_name)
        self.champions[champion_id] = champion
        return champion

    async def get_champion_by_id(self, champion_id: int) -> Champion | None:
        return self.champions.get(champion_id)

    # ------------------------------------------------------------------
    # Notification queue
    # ------------------------------------------------------------------

    async def insert_notification_event(self, event: NewNotificationEvent) -> NotificationEvent:
        record = NotificationEvent(id=uuid4(), created_at=self._clock(), **event.model_dump())
        self.events[record.id] = record
        return record

    async def get_pending_notification_events(self) -> list[NotificationEvent]:
        pending = [e for e in self.events.values() if not e.processed]
        return sorted(pending, key=lambda e: e.created_at)

    async def mark_notifications_processed(self, event_ids: Sequence[UUID]) -> None:
        now = self._clock()
        for event_id in event_ids:
            event = self.events.get(event_id)
            if event is not None and not event.processed:
                self.events[event_id] = event.model_copy(update={"processed": True, "processed_at": now})
