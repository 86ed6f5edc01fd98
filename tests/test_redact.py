from __future__ import annotations

from lolwatch._redact import is_secret_key, redact_for_log
from lolwatch.config import SummonerConfig, WatchConfig


def test_redact_for_log_redacts_credentials() -> None:
    payload = {
        "X-Riot-Token": "RGAPI-secret",
        "Authorization": "Bot abc",
        "riot_api_key": "RGAPI-secret",
        "discord_bot_token": "",
        "nested": {"token": "t", "game_name": "Alpha"},
        "summoners": ["Alpha#EUW"],
    }

    redacted = redact_for_log(payload)

    assert redacted["X-Riot-Token"] == "<redacted>"
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["riot_api_key"] == "<redacted>"
    assert redacted["discord_bot_token"] == ""
    assert redacted["nested"] == {"token": "<redacted>", "game_name": "Alpha"}
    assert redacted["summoners"] == ["Alpha#EUW"]


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_walks_config_dataclass() -> None:
    config = WatchConfig(
        riot_api_key="RGAPI-secret",
        discord_bot_token="bot-secret",
        discord_channel_id=1234,
        summoners=(SummonerConfig("Alpha", "EUW"),),
    )

    redacted = redact_for_log(config)

    assert redacted["riot_api_key"] == "<redacted>"
    assert redacted["discord_bot_token"] == "<redacted>"
    assert redacted["discord_channel_id"] == 1234
    assert redacted["summoners"] == [{"name": "Alpha", "tag": "EUW"}]
    assert "secret" not in repr(redacted)


def test_is_secret_key_matches_header_and_field_names() -> None:
    assert is_secret_key("X-Riot-Token")
    assert is_secret_key("RIOT_API_KEY")
    assert not is_secret_key("game_name")
    assert not is_secret_key("tag_line")
