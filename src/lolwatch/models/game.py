"""Game models: spectator snapshots, finished match results, state changes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field

from lolwatch.models._base import RiotBaseModel, RiotTimestamp


class ActiveGameInfo(RiotBaseModel):
    """A game in progress, as reported by ``spectator-v5``.

    Parameters
    ----------
    game_id : int
        Riot game id; the correlation key for "game started" events.
    champion_id : int
        Champion played by the tracked summoner (``0`` if unknown).
    game_mode : str
        ``CLASSIC``, ``ARAM``, ``CHERRY``...
    queue_id : int or None
        Queue id (``gameQueueConfigId``), ``None`` for custom games.
    game_start_time : datetime or None
        Start time; ``None`` while the game is still loading.
    """

    game_id: int
    champion_id: int = 0
    game_mode: str = "UNKNOWN"
    queue_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("gameQueueConfigId", "queueId", "queue_id"),
    )
    game_start_time: RiotTimestamp = None

    @classmethod
    def from_api(cls, payload: dict[str, Any], puuid: str) -> ActiveGameInfo:
        """Build from a raw spectator payload, picking *puuid*'s champion."""
        participants = payload.get("participants")
        champion_id = 0
        if isinstance(participants, list):
            for participant in participants:
                if isinstance(participant, dict) and participant.get("puuid") == puuid:
                    champion_id = int(participant.get("championId") or 0)
                    break
        data = dict(payload)
        data["championId"] = champion_id
        return cls.model_validate(data)


class MatchParticipant(RiotBaseModel):
    """One participant block of a ``match-v5`` payload."""

    puuid: str = ""
    win: bool = False
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    champion_id: int = 0
    champion_name: str = ""
    team_position: str = ""
    team_id: int = 0
    total_minions_killed: int = 0
    neutral_minions_killed: int = 0
    gold_earned: int = 0
    total_damage_dealt_to_champions: int = 0

    @property
    def total_cs(self) -> int:
        return self.total_minions_killed + self.neutral_minions_killed


class MatchInfo(RiotBaseModel):
    """The ``info`` block of a ``match-v5`` payload."""

    game_id: int = 0
    game_duration: int = 0
    game_mode: str = ""
    queue_id: int | None = None
    game_end_timestamp: RiotTimestamp = None
    participants: list[MatchParticipant] = Field(default_factory=list)

    @property
    def duration_secs(self) -> int:
        # Before patch 11.20 gameDuration was milliseconds and gameEndTimestamp absent.
        if self.game_end_timestamp is None:
            return self.game_duration // 1000
        return self.game_duration


class MatchResult(RiotBaseModel):
    """Result of a finished match from the tracked summoner's point of view.

    The ``enemy_*`` fields describe the lane opponent: the participant with
    the same (non-empty) ``teamPosition`` on the other team.  They are
    ``None`` in modes without positions (ARAM, Arena).
    """

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
    def from_api(cls, payload: dict[str, Any], puuid: str) -> MatchResult | None:
        """Build from a raw ``match-v5`` payload.

        Returns ``None`` when *puuid* did not take part in the match.
        """
        metadata = payload.get("metadata")
        metadata = metadata if isinstance(metadata, dict) else {}
        raw_info = payload.get("info")
        info = MatchInfo.model_validate(raw_info if isinstance(raw_info, dict) else {})

        me = next((p for p in info.participants if p.puuid == puuid), None)
        if me is None:
            return None

        enemy: MatchParticipant | None = None
        if me.team_position:
            enemy = next(
                (
                    p
                    for p in info.participants
                    if p.team_position == me.team_position and p.team_id != me.team_id and p.puuid != puuid
                ),
                None,
            )

        return cls(
            match_id=str(metadata.get("matchId") or ""),
            game_id=info.game_id,
            win=me.win,
            kills=me.kills,
            deaths=me.deaths,
            assists=me.assists,
            champion_id=me.champion_id,
            champion_name=me.champion_name,
            game_duration_secs=info.duration_secs,
            game_mode=info.game_mode,
            queue_id=info.queue_id,
            role=me.team_position,
            total_cs=me.total_cs,
            total_gold=me.gold_earned,
            total_damage=me.total_damage_dealt_to_champions,
            enemy_champion_name=enemy.champion_name if enemy else None,
            enemy_cs=enemy.total_cs if enemy else None,
            enemy_gold=enemy.gold_earned if enemy else None,
            enemy_damage=enemy.total_damage_dealt_to_champions if enemy else None,
            finished_at=info.game_end_timestamp,
        )


# ------------------------------------------------------------------
# State changes
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GameStarted:
    """The summoner entered a game lolwatch is not tracking yet."""

    game: ActiveGameInfo


@dataclass(frozen=True, slots=True)
class GameEnded:
    """A tracked game is over (or was inferred from match history).

    ``is_featured_mode`` is set when the game was never visible through
    the spectator API and was only discovered as an unrecorded match.
    """

    game_id: int
    is_featured_mode: bool = False


@dataclass(frozen=True, slots=True)
class NoChange:
    """Nothing to do this cycle."""


GameStateChange = GameStarted | GameEnded | NoChange
