"""Data models for lolwatch."""

from lolwatch.models._base import RecordModel, RiotBaseModel, parse_riot_timestamp, utcnow
from lolwatch.models.game import (
    ActiveGameInfo,
    GameEnded,
    GameStarted,
    GameStateChange,
    MatchInfo,
    MatchParticipant,
    MatchResult,
    NoChange,
)
from lolwatch.models.notification import EventType, NewNotificationEvent, NotificationEvent
from lolwatch.models.records import ActiveGame, Champion, MatchHistory, NewActiveGame, NewMatchResult
from lolwatch.models.summoner import Summoner, SummonerInfo

__all__ = [
    "ActiveGame",
    "ActiveGameInfo",
    "Champion",
    "EventType",
    "GameEnded",
    "GameStarted",
    "GameStateChange",
    "MatchHistory",
    "MatchInfo",
    "MatchParticipant",
    "MatchResult",
    "NewActiveGame",
    "NewMatchResult",
    "NewNotificationEvent",
    "NoChange",
    "NotificationEvent",
    "RecordModel",
    "RiotBaseModel",
    "Summoner",
    "SummonerInfo",
    "parse_riot_timestamp",
    "utcnow",
]
