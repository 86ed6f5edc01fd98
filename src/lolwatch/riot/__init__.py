"""Riot Games API access."""

from lolwatch.riot.client import RiotClient, SourceClient
from lolwatch.riot.routing import game_id_from_match_id, match_id_for_game, platform_for_region, regional_for_region

__all__ = [
    "RiotClient",
    "SourceClient",
    "game_id_from_match_id",
    "match_id_for_game",
    "platform_for_region",
    "regional_for_region",
]
