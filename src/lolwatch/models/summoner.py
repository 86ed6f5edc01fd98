"""Summoner (tracked account) models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from lolwatch.models._base import RecordModel, RiotBaseModel


class SummonerInfo(RiotBaseModel):
    """Account resolved from a Riot ID via ``account-v1``."""

    puuid: str
    game_name: str = ""
    tag_line: str = ""


class Summoner(RecordModel):
    """A tracked summoner.

    Created once at startup by ``Repository.upsert_summoner`` and
    immutable for the rest of the run.  ``id`` is the stable local key all
    other records reference; ``riot_puuid`` is the external identity.
    """

    id: UUID
    riot_puuid: str
    game_name: str
    tag_line: str
    region: str
    created_at: datetime
    updated_at: datetime

    @property
    def display_name(self) -> str:
        return f"{self.game_name}#{self.tag_line}"
