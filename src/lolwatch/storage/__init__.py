"""Persistence for tracked summoners, games and queued notifications."""

from lolwatch.storage.base import Repository
from lolwatch.storage.memory import InMemoryRepository
from lolwatch.storage.sqlite import SqliteRepository

__all__ = ["InMemoryRepository", "Repository", "SqliteRepository"]
