"""Service configuration for lolwatch."""

from __future__ import annotations

import dataclasses
import os
import re
from collections.abc import Mapping
from typing import Any

from lolwatch.exceptions import WatchConfigError

_NAME_RE = re.compile(r"^[\w \-]{1,24}$")
_TAG_RE = re.compile(r"^[^\W_]{1,5}$")


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env: Mapping[str, str], key: str, cast: type) -> Any:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return None
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise WatchConfigError(f"Invalid value for {key}: {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class SummonerConfig:
    """One roster entry, a Riot ID split into its two halves."""

    name: str
    tag: str

    @property
    def riot_id(self) -> str:
        return f"{self.name}#{self.tag}"


def parse_summoner_names(value: str) -> list[SummonerConfig]:
    """Parse a ``"Name#TAG|Other Name#EUW"`` roster string.

    Each entry is split on its *last* ``#``.  Names are 1-24 characters of
    letters, digits, spaces, ``-`` and ``_``; tags are 1-5 letters or
    digits.  An empty or blank string yields an empty roster.

    Raises
    ------
    WatchConfigError
        If any entry is malformed.
    """
    if not value.strip():
        return []

    roster: list[SummonerConfig] = []
    for entry in value.split("|"):
        entry = entry.strip()
        name, sep, tag = entry.rpartition("#")
        if not sep:
            raise WatchConfigError(f"Invalid summoner name format: {entry}")
        name = name.strip()
        tag = tag.strip()
        if not name or not tag:
            raise WatchConfigError(f"Invalid summoner name format: {entry}")
        if not _NAME_RE.match(name):
            raise WatchConfigError(f"Invalid summoner name format: Invalid name: {name}")
        if not _TAG_RE.match(tag):
            raise WatchConfigError(f"Invalid summoner name format: Invalid tag: {tag}")
        roster.append(SummonerConfig(name=name, tag=tag))
    return roster


@dataclasses.dataclass(frozen=True)
class WatchConfig:
    """Service configuration.

    Parameters
    ----------
    riot_api_key : str
        Riot developer/production API key, sent as ``X-Riot-Token``.
    discord_bot_token : str
        Bot token used for the Discord REST API.
    discord_channel_id : int
        Channel that receives grouped game notifications.
    summoners : tuple of SummonerConfig
        Roster of Riot IDs to track.
    database_path : str
        SQLite database file.
    default_region : str
        Region/platform shorthand (``"euw1"``, ``"na"``, ...) used for
        every summoner in the roster.
    polling_interval : float
        Seconds between two polls of the same summoner.
    notification_interval : float
        Seconds between two notification processor cycles.
    grace_period : float
        Minimum age in seconds a queued event must reach before it is
        grouped and delivered.
    match_retry_attempts : int
        Attempts to fetch a finished match before giving up.
    match_retry_delay : float
        Seconds between two match fetch attempts.
    featured_mode_fallback : bool
        When neither the spectator API nor local state shows a game, look
        for an unrecorded most-recent match (modes the spectator API does
        not report, e.g. Arena).
    poll_jitter : float
        Upper bound in seconds of a random delay before each summoner's
        first poll, to spread the initial burst of API calls.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    log_level : str
        Root log level used by the CLI.
    """

    riot_api_key: str = ""
    discord_bot_token: str = ""
    discord_channel_id: int = 0
    summoners: tuple[SummonerConfig, ...] = ()
    database_path: str = "lolwatch.db"
    default_region: str = "euw1"
    polling_interval: float = 180.0
    notification_interval: float = 5.0
    grace_period: float = 30.0
    match_retry_attempts: int = 6
    match_retry_delay: float = 10.0
    featured_mode_fallback: bool = True
    poll_jitter: float = 0.0
    request_timeout: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, **overrides: Any) -> WatchConfig:
        """Create configuration from environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        WatchConfigError
            If a numeric variable or the roster cannot be parsed.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "RIOT_API_KEY": "riot_api_key",
            "DISCORD_BOT_TOKEN": "discord_bot_token",
            "DATABASE_PATH": "database_path",
            "DEFAULT_REGION": "default_region",
            "LOG_LEVEL": "log_level",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMBER_MAP: dict[str, tuple[str, type]] = {
            "DISCORD_CHANNEL_ID": ("discord_channel_id", int),
            "POLLING_INTERVAL_SECS": ("polling_interval", float),
            "NOTIFICATION_INTERVAL_SECS": ("notification_interval", float),
            "NOTIFICATION_GRACE_SECS": ("grace_period", float),
            "MATCH_RETRY_ATTEMPTS": ("match_retry_attempts", int),
            "MATCH_RETRY_DELAY_SECS": ("match_retry_delay", float),
            "POLL_JITTER_SECS": ("poll_jitter", float),
            "REQUEST_TIMEOUT_SECS": ("request_timeout", float),
        }
        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            if field_name in overrides:
                continue
            parsed = _env_number(env, env_key, cast)
            if parsed is not None:
                config_kwargs[field_name] = parsed

        if "summoners" not in overrides:
            roster = env.get("SUMMONER_NAMES")
            if roster is not None:
                config_kwargs["summoners"] = tuple(parse_summoner_names(roster))

        if "featured_mode_fallback" not in overrides:
            config_kwargs["featured_mode_fallback"] = _env_bool(env.get("FEATURED_MODE_FALLBACK"), True)

        summoners = overrides.pop("summoners", None)
        if isinstance(summoners, str):
            config_kwargs["summoners"] = tuple(parse_summoner_names(summoners))
        elif summoners is not None:
            config_kwargs["summoners"] = tuple(summoners)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

    def validate(self, *, require_discord: bool = True, require_database: bool = True) -> None:
        """Check that the settings needed to run the service are present.

        ``require_discord`` and ``require_database`` are turned off for
        dry runs, which log notifications and keep state in memory.

        Raises
        ------
        WatchConfigError
            Naming the first missing or out-of-range setting.
        """
        if not self.riot_api_key:
            raise WatchConfigError("Missing required environment variable: RIOT_API_KEY")
        if require_discord:
            if not self.discord_bot_token:
                raise WatchConfigError("Missing required environment variable: DISCORD_BOT_TOKEN")
            if self.discord_channel_id <= 0:
                raise WatchConfigError("Missing required environment variable: DISCORD_CHANNEL_ID")
        if require_database and (not self.database_path or self.database_path == ":memory:"):
            raise WatchConfigError(f"DATABASE_PATH must name a file, got {self.database_path!r}")
        if self.match_retry_attempts < 1:
            raise WatchConfigError(f"match_retry_attempts must be >= 1, got {self.match_retry_attempts}")
        for name in ("polling_interval", "notification_interval", "grace_period", "match_retry_delay"):
            if getattr(self, name) < 0:
                raise WatchConfigError(f"{name} must be >= 0, got {getattr(self, name)}")
