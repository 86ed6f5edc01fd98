from __future__ import annotations

import pytest

from lolwatch.riot.routing import (
    game_id_from_match_id,
    match_id_for_game,
    platform_base_url,
    platform_for_region,
    regional_base_url,
    regional_for_region,
)


@pytest.mark.parametrize(
    ("region", "platform", "regional"),
    [
        ("euw", "EUW1", "europe"),
        ("EUW1", "EUW1", "europe"),
        ("na", "NA1", "americas"),
        ("kr", "KR", "asia"),
        ("vn", "VN2", "sea"),
        ("oce", "OC1", "americas"),
        ("tr", "TR1", "europe"),
        ("mars", "EUW1", "europe"),
    ],
)
def test_region_routing(region: str, platform: str, regional: str) -> None:
    assert platform_for_region(region) == platform
    assert regional_for_region(region) == regional


def test_base_urls() -> None:
    assert platform_base_url("na") == "https://na1.api.riotgames.com"
    assert regional_base_url("na") == "https://americas.api.riotgames.com"


def test_match_id_round_trip() -> None:
    match_id = match_id_for_game("EUW1", 7012345678)

    assert match_id == "EUW1_7012345678"
    assert game_id_from_match_id(match_id) == 7012345678


@pytest.mark.parametrize("match_id", ["", "EUW1", "EUW1_", "EUW1_12a", "EUW1_-5", "EUW1_²"])
def test_game_id_from_match_id_fails_closed(match_id: str) -> None:
    assert game_id_from_match_id(match_id) is None
