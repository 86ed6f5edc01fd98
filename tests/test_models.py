from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from lolwatch.models import (
    ActiveGameInfo,
    EventType,
    MatchResult,
    NewActiveGame,
    NewNotificationEvent,
    NotificationEvent,
    SummonerInfo,
    parse_riot_timestamp,
)


def _participant(puuid: str, team_id: int, position: str, **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "puuid": puuid,
        "teamId": team_id,
        "teamPosition": position,
        "win": team_id == 100,
        "kills": 5,
        "deaths": 3,
        "assists": 8,
        "championId": 103,
        "championName": "Ahri",
        "totalMinionsKilled": 200,
        "neutralMinionsKilled": 12,
        "goldEarned": 12000,
        "totalDamageDealtToChampions": 25000,
        "someFieldWeIgnore": True,
    }
    data.update(overrides)
    return data


def _match_payload(participants: list[dict[str, Any]], **info: Any) -> dict[str, Any]:
    payload_info: dict[str, Any] = {
        "gameId": 7012345678,
        "gameDuration": 1800,
        "gameEndTimestamp": 1767297600000,
        "gameMode": "CLASSIC",
        "queueId": 420,
        "participants": participants,
    }
    payload_info.update(info)
    return {"metadata": {"matchId": "EUW1_7012345678"}, "info": payload_info}


def test_parse_riot_timestamp_handles_seconds_and_millis() -> None:
    expected = datetime(2026, 1, 1, 20, 0, tzinfo=UTC)

    assert parse_riot_timestamp(1767297600) == expected
    assert parse_riot_timestamp(1767297600000) == expected
    assert parse_riot_timestamp(0) is None
    assert parse_riot_timestamp(None) is None


def test_summoner_info_from_camel_case() -> None:
    info = SummonerInfo.model_validate({"puuid": "p", "gameName": "Faker", "tagLine": "KR1"})

    assert info.game_name == "Faker"
    assert info.tag_line == "KR1"


def test_active_game_info_picks_the_tracked_participant() -> None:
    payload = {
        "gameId": 42,
        "gameMode": "ARAM",
        "gameQueueConfigId": 450,
        "gameStartTime": 0,
        "participants": [
            {"puuid": "other", "championId": 1},
            {"puuid": "me", "championId": 103},
        ],
    }

    game = ActiveGameInfo.from_api(payload, "me")

    assert game.game_id == 42
    assert game.champion_id == 103
    assert game.queue_id == 450
    assert game.game_start_time is None
    assert NewActiveGame.from_game(uuid4(), game).game_start_time is not None


def test_match_result_includes_lane_opponent() -> None:
    payload = _match_payload(
        [
            _participant("me", 100, "MIDDLE"),
            _participant("ally", 100, "TOP", championName="Garen"),
            _participant(
                "enemy",
                200,
                "MIDDLE",
                championName="Zed",
                totalMinionsKilled=180,
                neutralMinionsKilled=0,
                goldEarned=10000,
                totalDamageDealtToChampions=18000,
            ),
        ]
    )

    result = MatchResult.from_api(payload, "me")

    assert result is not None
    assert result.match_id == "EUW1_7012345678"
    assert result.win is True
    assert result.total_cs == 212
    assert result.role == "MIDDLE"
    assert result.game_duration_secs == 1800
    assert result.finished_at == datetime(2026, 1, 1, 20, 0, tzinfo=UTC)
    assert result.enemy_champion_name == "Zed"
    assert result.enemy_cs == 180
    assert result.enemy_gold == 10000


def test_match_result_without_positions_has_no_opponent() -> None:
    payload = _match_payload(
        [_participant("me", 100, ""), _participant("enemy", 200, "")],
        gameMode="ARAM",
        queueId=450,
    )

    result = MatchResult.from_api(payload, "me")

    assert result is not None
    assert result.enemy_champion_name is None
    assert result.enemy_cs is None


def test_legacy_match_duration_is_milliseconds() -> None:
    payload = _match_payload([_participant("me", 100, "TOP")], gameDuration=1_800_000, gameEndTimestamp=None)

    result = MatchResult.from_api(payload, "me")

    assert result is not None
    assert result.game_duration_secs == 1800


def test_match_result_for_absent_puuid_is_none() -> None:
    assert MatchResult.from_api(_match_payload([_participant("me", 100, "TOP")]), "stranger") is None


def test_correlation_keys() -> None:
    summoner_id = uuid4()
    now = datetime(2026, 1, 1, tzinfo=UTC)
    game = ActiveGameInfo(game_id=42, champion_id=103, game_mode="CLASSIC")
    started = NotificationEvent(
        id=uuid4(),
        created_at=now,
        **NewNotificationEvent.game_started(summoner_id, game, "Ahri").model_dump(),
    )
    result = MatchResult(match_id="EUW1_42", game_id=42, win=False)
    ended = NotificationEvent(
        id=uuid4(),
        created_at=now,
        **NewNotificationEvent.game_ended(summoner_id, result, is_featured_mode=True).model_dump(),
    )

    assert started.event_type is EventType.GAME_STARTED
    assert started.correlation_key == "42"
    assert ended.correlation_key == "EUW1_42"
    assert ended.is_featured_mode is True
    assert ended.win is False
