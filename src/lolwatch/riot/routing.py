"""Riot API routing: platform and regional hosts, match ids."""

from __future__ import annotations

import logging

from lolwatch._constants import RIOT_API_DOMAIN

_logger = logging.getLogger(__name__)

_PLATFORMS: dict[str, str] = {
    "br1": "BR1",
    "br": "BR1",
    "eun1": "EUN1",
    "eune": "EUN1",
    "euw1": "EUW1",
    "euw": "EUW1",
    "jp1": "JP1",
    "jp": "JP1",
    "kr": "KR",
    "la1": "LA1",
    "lan": "LA1",
    "la2": "LA2",
    "las": "LA2",
    "na1": "NA1",
    "na": "NA1",
    "oc1": "OC1",
    "oce": "OC1",
    "tr1": "TR1",
    "tr": "TR1",
    "ru": "RU",
    "sg2": "SG2",
    "sg": "SG2",
    "tw2": "TW2",
    "tw": "TW2",
    "vn2": "VN2",
    "vn": "VN2",
}

_REGIONALS: dict[str, str] = {
    "BR1": "americas",
    "LA1": "americas",
    "LA2": "americas",
    "NA1": "americas",
    "OC1": "americas",
    "JP1": "asia",
    "KR": "asia",
    "SG2": "sea",
    "TW2": "sea",
    "VN2": "sea",
    "EUN1": "europe",
    "EUW1": "europe",
    "TR1": "europe",
    "RU": "europe",
}

DEFAULT_PLATFORM = "EUW1"


def platform_for_region(region: str) -> str:
    """Map a region shorthand (``"euw"``, ``"na1"``...) to a platform route.

    Unknown regions fall back to ``EUW1``.
    """
    return _PLATFORMS.get(region.strip().lower(), DEFAULT_PLATFORM)


def regional_for_region(region: str) -> str:
    """Map a region shorthand to the regional route used by account-v1 and match-v5."""
    return _REGIONALS[platform_for_region(region)]


def platform_base_url(region: str) -> str:
    return f"https://{platform_for_region(region).lower()}.{RIOT_API_DOMAIN}"


def regional_base_url(region: str) -> str:
    return f"https://{regional_for_region(region)}.{RIOT_API_DOMAIN}"


def match_id_for_game(platform: str, game_id: int) -> str:
    return f"{platform}_{game_id}"


def game_id_from_match_id(match_id: str) -> int | None:
    """Extract the numeric game id from ``"<PLATFORM>_<game_id>"``.

    Returns ``None`` for anything that does not end in ``_<integer>``.
    """
    _, sep, tail = match_id.rpartition("_")
    if not sep or not (tail.isascii() and tail.isdigit()):
        _logger.debug("Cannot derive game id from match id %r", match_id)
        return None
    return int(tail)
