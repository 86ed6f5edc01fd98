"""Per-summoner game state machine.

Each poll compares what the spectator API reports right now with the
active game lolwatch has on record and classifies the difference as a
:class:`GameStarted`, :class:`GameEnded` or :class:`NoChange`.  The
handlers then update the repository and queue one notification event per
transition.  Delivery is the notification processor's job.
"""

from __future__ import annotations

import asyncio
import logging

from lolwatch.config import WatchConfig
from lolwatch.exceptions import SourceError, StorageError
from lolwatch.models import (
    ActiveGameInfo,
    GameEnded,
    GameStarted,
    GameStateChange,
    MatchResult,
    NewActiveGame,
    NewMatchResult,
    NewNotificationEvent,
    NoChange,
    Summoner,
)
from lolwatch.riot.client import SourceClient
from lolwatch.riot.routing import game_id_from_match_id
from lolwatch.storage.base import Repository

_logger = logging.getLogger(__name__)


class GameTracker:
    """Detect and record game transitions for tracked summoners.

    One instance is shared by every poll task; it keeps no per-summoner
    state of its own.

    Parameters
    ----------
    source : SourceClient
        Upstream game API.
    repository : Repository
        Shared persistence.
    match_retry_attempts : int
        Attempts to fetch a finished match (its data is published with a
        delay after the game ends).
    match_retry_delay : float
        Seconds between two attempts.
    featured_mode_fallback : bool
        Look for an unrecorded latest match when a summoner is idle and
        has no tracked game.
    """

    def __init__(
        self,
        source: SourceClient,
        repository: Repository,
        *,
        match_retry_attempts: int = 6,
        match_retry_delay: float = 10.0,
        featured_mode_fallback: bool = True,
    ) -> None:
        self._source = source
        self._repository = repository
        self._match_retry_attempts = max(1, match_retry_attempts)
        self._match_retry_delay = match_retry_delay
        self._featured_mode_fallback = featured_mode_fallback

    @classmethod
    def from_config(cls, config: WatchConfig, source: SourceClient, repository: Repository) -> GameTracker:
        return cls(
            source,
            repository,
            match_retry_attempts=config.match_retry_attempts,
            match_retry_delay=config.match_retry_delay,
            featured_mode_fallback=config.featured_mode_fallback,
        )

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    async def check_summoner_game_state(self, summoner: Summoner) -> GameStateChange:
        """Classify the summoner's current state against the tracked game."""
        current = await self._source.get_active_game(summoner.riot_puuid)
        _logger.debug(
            "Current game for %s: %s",
            summoner.display_name,
            "in game" if current is not None else "not in game",
        )

        tracked_games = await self._repository.get_active_games_for_summoner(summoner.id)
        tracked = tracked_games[0] if tracked_games else None

        if current is not None and tracked is None:
            return GameStarted(current)
        if current is not None and tracked is not None and current.game_id != tracked.game_id:
            # The new game is picked up on the next poll.
            return GameEnded(tracked.game_id)
        if current is None and tracked is not None:
            return GameEnded(tracked.game_id)
        if current is None and tracked is None and self._featured_mode_fallback:
            return await self._check_unrecorded_match(summoner)
        return NoChange()

    async def _check_unrecorded_match(self, summoner: Summoner) -> GameStateChange:
        match_id = await self._source.get_recent_match_id(summoner.riot_puuid)
        if match_id is None:
            return NoChange()
        if await self._repository.get_match_history_by_match_id(summoner.id, match_id) is not None:
            return NoChange()
        game_id = game_id_from_match_id(match_id)
        if game_id is None:
            return NoChange()
        _logger.info("Found unrecorded match %s for %s", match_id, summoner.display_name)
        return GameEnded(game_id, is_featured_mode=True)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def handle_game_started(self, summoner: Summoner, game: ActiveGameInfo) -> None:
        """Record the active game, then queue a ``GAME_STARTED`` event.

        A failed insert propagates and nothing is queued.
        """
        await self._repository.insert_active_game(NewActiveGame.from_game(summoner.id, game))
        champion_name = await self._champion_name(game.champion_id)
        await self._repository.insert_notification_event(
            NewNotificationEvent.game_started(summoner.id, game, champion_name)
        )
        _logger.info(
            "%s started game %s (%s, %s)",
            summoner.display_name,
            game.game_id,
            game.game_mode,
            champion_name,
        )

    async def _champion_name(self, champion_id: int) -> str:
        champion = await self._repository.get_champion_by_id(champion_id)
        if champion is None:
            return f"Champion #{champion_id}"
        return champion.champion_name

    async def handle_game_ended(
        self,
        summoner: Summoner,
        game_id: int,
        *,
        is_featured_mode: bool = False,
    ) -> MatchResult | None:
        """Forget the active game, fetch its result and queue ``GAME_ENDED``.

        Returns ``None`` when the match never became available; in that
        case nothing is recorded or queued.
        """
        await self._repository.delete_active_game_by_summoner_and_game(summoner.id, game_id)

        result = await self.fetch_match_with_retry(summoner, game_id)
        if result is None:
            return None

        try:
            inserted = await self._repository.insert_match_result(NewMatchResult.from_result(summoner.id, result))
        except StorageError:
            _logger.warning("Could not record match %s for %s", result.match_id, summoner.display_name, exc_info=True)
        else:
            if inserted is None:
                _logger.debug("Match %s already recorded for %s", result.match_id, summoner.display_name)

        await self._repository.insert_notification_event(
            NewNotificationEvent.game_ended(summoner.id, result, is_featured_mode=is_featured_mode)
        )
        _logger.info(
            "%s finished match %s (%s)",
            summoner.display_name,
            result.match_id,
            "win" if result.win else "loss",
        )
        return result

    async def fetch_match_with_retry(self, summoner: Summoner, game_id: int) -> MatchResult | None:
        """Fetch the finished match, retrying while it is not published yet."""
        match_id = self._source.match_id_for_game(game_id)
        attempts = self._match_retry_attempts
        _logger.info("Looking up match %s for %s", match_id, summoner.display_name)

        for attempt in range(1, attempts + 1):
            if attempt > 1 and self._match_retry_delay > 0:
                await asyncio.sleep(self._match_retry_delay)

            try:
                result = await self._source.get_match_result(match_id, summoner.riot_puuid)
            except SourceError:
                _logger.debug("Match %s attempt=%d/%d failed", match_id, attempt, attempts, exc_info=True)
                continue

            if result is not None:
                return result
            _logger.debug("Match %s not yet available (attempt %d/%d)", match_id, attempt, attempts)

        _logger.warning("Could not find match data for %s after %d attempts", match_id, attempts)
        return None

    # ------------------------------------------------------------------
    # Poll cycle
    # ------------------------------------------------------------------

    async def poll_summoner(self, summoner: Summoner) -> GameStateChange:
        """Run one full classify-and-handle cycle for *summoner*."""
        change = await self.check_summoner_game_state(summoner)
        if isinstance(change, GameStarted):
            await self.handle_game_started(summoner, change.game)
        elif isinstance(change, GameEnded):
            await self.handle_game_ended(summoner, change.game_id, is_featured_mode=change.is_featured_mode)
        return change
