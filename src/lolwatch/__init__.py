"""lolwatch - Discord notifications for League of Legends games played by a roster of summoners."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("lolwatch")
except PackageNotFoundError:
    __version__ = "0+local"
from lolwatch.config import SummonerConfig, WatchConfig, parse_summoner_names
from lolwatch.exceptions import (
    DeliveryError,
    LolWatchError,
    RiotAccountNotFoundError,
    RiotRateLimitError,
    SourceError,
    StorageError,
    WatchConfigError,
)
from lolwatch.notification import DiscordNotifier, NotificationProcessor
from lolwatch.riot import RiotClient
from lolwatch.storage import InMemoryRepository, SqliteRepository
from lolwatch.supervisor import Supervisor
from lolwatch.tracker import GameTracker

__all__ = [
    "DeliveryError",
    "DiscordNotifier",
    "GameTracker",
    "InMemoryRepository",
    "LolWatchError",
    "NotificationProcessor",
    "RiotAccountNotFoundError",
    "RiotClient",
    "RiotRateLimitError",
    "SourceError",
    "SqliteRepository",
    "StorageError",
    "Supervisor",
    "SummonerConfig",
    "WatchConfig",
    "WatchConfigError",
    "__version__",
    "parse_summoner_names",
]
