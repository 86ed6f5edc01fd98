"""SQLite repository.

WAL mode for concurrent reads, single writer lock for atomic writes.
Every blocking call runs in a worker thread via :func:`asyncio.to_thread`;
each worker thread lazily opens its own connection.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar
from uuid import UUID, uuid4

from lolwatch.exceptions import StorageError
from lolwatch.models import (
    ActiveGame,
    Champion,
    MatchHistory,
    NewActiveGame,
    NewMatchResult,
    NewNotificationEvent,
    NotificationEvent,
    Summoner,
    utcnow,
)

_logger = logging.getLogger(__name__)

T = TypeVar("T")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS summoners (
    id TEXT PRIMARY KEY,
    riot_puuid TEXT NOT NULL UNIQUE,
    game_name TEXT NOT NULL,
    tag_line TEXT NOT NULL,
    region TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS active_games (
    id TEXT PRIMARY KEY,
    summoner_id TEXT NOT NULL REFERENCES summoners(id) ON DELETE CASCADE,
    game_id INTEGER NOT NULL,
    champion_id INTEGER NOT NULL,
    game_mode TEXT NOT NULL,
    queue_id INTEGER,
    game_start_time TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS match_history (
    id TEXT PRIMARY KEY,
    summoner_id TEXT NOT NULL REFERENCES summoners(id) ON DELETE CASCADE,
    match_id TEXT NOT NULL,
    game_id INTEGER NOT NULL,
    win INTEGER NOT NULL,
    kills INTEGER NOT NULL,
    deaths INTEGER NOT NULL,
    assists INTEGER NOT NULL,
    champion_id INTEGER NOT NULL,
    champion_name TEXT NOT NULL,
    game_duration_secs INTEGER NOT NULL,
    game_mode TEXT NOT NULL,
    queue_id INTEGER,
    role TEXT NOT NULL,
    total_cs INTEGER NOT NULL,
    total_gold INTEGER NOT NULL,
    total_damage INTEGER NOT NULL,
    enemy_champion_name TEXT,
    enemy_cs INTEGER,
    enemy_gold INTEGER,
    enemy_damage INTEGER,
    finished_at TEXT,
    created_at TEXT NOT NULL,
    UNIQUE (summoner_id, match_id)
);

CREATE TABLE IF NOT EXISTS champions (
    champion_id INTEGER PRIMARY KEY,
    champion_name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS notification_queue (
    id TEXT PRIMARY KEY,
    summoner_id TEXT NOT NULL REFERENCES summoners(id) ON DELETE CASCADE,
    event_type TEXT NOT NULL,
    game_id INTEGER NOT NULL,
    match_id TEXT,
    champion_id INTEGER NOT NULL,
    champion_name TEXT NOT NULL,
    game_mode TEXT NOT NULL,
    queue_id INTEGER,
    is_featured_mode INTEGER NOT NULL DEFAULT 0,
    win INTEGER,
    kills INTEGER,
    deaths INTEGER,
    assists INTEGER,
    role TEXT,
    game_duration_secs INTEGER,
    total_cs INTEGER,
    total_gold INTEGER,
    total_damage INTEGER,
    enemy_champion_name TEXT,
    enemy_cs INTEGER,
    enemy_gold INTEGER,
    enemy_damage INTEGER,
    processed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    processed_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_active_games_summoner ON active_games(summoner_id);
CREATE INDEX IF NOT EXISTS idx_notification_queue_pending ON notification_queue(processed, created_at);
"""


def _ts(value: datetime | None) -> str | None:
    """Serialize to a fixed-width UTC ISO string so text order is time order."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def _insert_sql(table: str, columns: Sequence[str]) -> str:
    placeholders = ", ".join("?" for _ in columns)
    return f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"


def _params(values: dict[str, Any]) -> list[Any]:
    return [_ts(v) if isinstance(v, datetime) else str(v) if isinstance(v, UUID) else v for v in values.values()]


class SqliteRepository:
    """SQLite-backed :class:`~lolwatch.storage.base.Repository`.

    >>> repo = SqliteRepository("lolwatch.db")  # doctest: +SKIP
    """

    def __init__(self, path: str, *, clock: Callable[[], datetime] | None = None) -> None:
        self.path = path
        self._clock = clock or utcnow
        self._write_lock = threading.Lock()
        self._local = threading.local()
        self._connections: list[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()

        # Each worker thread opens its own connection, so every one of them needs the same file.
        if not path or path == ":memory:" or "mode=memory" in path:
            raise StorageError(
                f"SQLite needs a database file, got {path!r}; use --dry-run for an in-memory run",
                operation="open",
            )
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self._init_schema()
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot initialize database {path}: {exc}", operation="init_schema") from exc

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def _get_connection(self) -> sqlite3.Connection:
        conn = getattr(self._local, "connection", None)
        if conn is None:
            conn = sqlite3.connect(self.path, timeout=30.0, check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
            conn.row_factory = sqlite3.Row
            self._local.connection = conn
            with self._connections_lock:
                self._connections.append(conn)
        return conn

    @contextmanager
    def _writer(self) -> Iterator[sqlite3.Connection]:
        with self._write_lock:
            conn = self._get_connection()
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def _init_schema(self) -> None:
        with self._writer() as conn:
            conn.executescript(SCHEMA_SQL)

    async def _run(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as exc:
            _logger.debug("SQLite %s failed", operation, exc_info=True)
            raise StorageError(f"{operation} failed: {exc}", operation=operation) from exc

    def close(self) -> None:
        """Close every connection opened by this repository."""
        with self._connections_lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            conn.close()
        self._local = threading.local()

    # ------------------------------------------------------------------
    # Summoners
    # ------------------------------------------------------------------

    def _upsert_summoner(self, puuid: str, game_name: str, tag_line: str, region: str) -> Summoner:
        now = _ts(self._clock())
        with self._writer() as conn:
            conn.execute(
                """
                INSERT INTO summoners (id, riot_puuid, game_name, tag_line, region, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (riot_puuid) DO UPDATE SET
                    game_name = excluded.game_name,
                    tag_line = excluded.tag_line,
                    updated_at = excluded.updated_at
                """,
                (str(uuid4()), puuid, game_name, tag_line, region, now, now),
            )
            row = conn.execute("SELECT * FROM summoners WHERE riot_puuid = ?", (puuid,)).fetchone()
        return Summoner.model_validate(dict(row))

    async def upsert_summoner(self, puuid: str, game_name: str, tag_line: str, region: str) -> Summoner:
        return await self._run("upsert_summoner", self._upsert_summoner, puuid, game_name, tag_line, region)

    def _get_summoner_by_puuid(self, puuid: str) -> Summoner | None:
        row = self._get_connection().execute("SELECT * FROM summoners WHERE riot_puuid = ?", (puuid,)).fetchone()
        return Summoner.model_validate(dict(row)) if row else None

    async def get_summoner_by_puuid(self, puuid: str) -> Summoner | None:
        return await self._run("get_summoner_by_puuid", self._get_summoner_by_puuid, puuid)

    def _get_all_summoners(self) -> list[Summoner]:
        rows = self._get_connection().execute("SELECT * FROM summoners ORDER BY created_at, rowid").fetchall()
        return [Summoner.model_validate(dict(r)) for r in rows]

    async def get_all_summoners(self) -> list[Summoner]:
        return await self._run("get_all_summoners", self._get_all_summoners)

    # ------------------------------------------------------------------
    # Active games
    # ------------------------------------------------------------------

    def _insert_active_game(self, game: NewActiveGame) -> ActiveGame:
        record = ActiveGame(id=uuid4(), created_at=self._clock(), **game.model_dump())
        values = record.model_dump()
        with self._writer() as conn:
            conn.execute(_insert_sql("active_games", list(values)), _params(values))
        return record

    async def insert_active_game(self, game: NewActiveGame) -> ActiveGame:
        return await self._run("insert_active_game", self._insert_active_game, game)

    def _get_active_games_for_summoner(self, summoner_id: UUID) -> list[ActiveGame]:
        rows = (
            self._get_connection()
            .execute("SELECT * FROM active_games WHERE summoner_id = ? ORDER BY created_at", (str(summoner_id),))
            .fetchall()
        )
        return [ActiveGame.model_validate(dict(r)) for r in rows]

    async def get_active_games_for_summoner(self, summoner_id: UUID) -> list[ActiveGame]:
        return await self._run("get_active_games_for_summoner", self._get_active_games_for_summoner, summoner_id)

    def _delete_active_game(self, summoner_id: UUID, game_id: int) -> None:
        with self._writer() as conn:
            conn.execute(
                "DELETE FROM active_games WHERE summoner_id = ? AND game_id = ?",
                (str(summoner_id), game_id),
            )

    async def delete_active_game_by_summoner_and_game(self, summoner_id: UUID, game_id: int) -> None:
        await self._run("delete_active_game", self._delete_active_game, summoner_id, game_id)

    # ------------------------------------------------------------------
    # Match history
    # ------------------------------------------------------------------

    def _insert_match_result(self, result: NewMatchResult) -> MatchHistory | None:
        record = MatchHistory(id=uuid4(), created_at=self._clock(), **result.model_dump())
        values = record.model_dump()
        sql = _insert_sql("match_history", list(values)) + " ON CONFLICT (summoner_id, match_id) DO NOTHING"
        with self._writer() as conn:
            cursor = conn.execute(sql, _params(values))
            if cursor.rowcount == 0:
                return None
        return record

    async def insert_match_result(self, result: NewMatchResult) -> MatchHistory | None:
        return await self._run("insert_match_result", self._insert_match_result, result)

    def _get_match_history(self, summoner_id: UUID, match_id: str) -> MatchHistory | None:
        row = (
            self._get_connection()
            .execute(
                "SELECT * FROM match_history WHERE summoner_id = ? AND match_id = ?",
                (str(summoner_id), match_id),
            )
            .fetchone()
        )
        return MatchHistory.model_validate(dict(row)) if row else None

    async def get_match_history_by_match_id(self, summoner_id: UUID, match_id: str) -> MatchHistory | None:
        return await self._run("get_match_history_by_match_id", self._get_match_history, summoner_id, match_id)

    # ------------------------------------------------------------------
    # Champions
    # ------------------------------------------------------------------

    def _upsert_champion(self, champion_id: int, champion_name: str) -> Champion:
        with self._writer() as conn:
            conn.execute(
                """
                INSERT INTO champions (champion_id, champion_name) VALUES (?, ?)
                ON CONFLICT (champion_id) DO UPDATE SET champion_name = excluded.champion_name
                """,
                (champion_id, champion_name),
            )
        return Champion(champion_id=champion_id, champion_name=champion_name)

    async def upsert_champion(self, champion_id: int, champion_name: str) -> Champion:
        return await self._run("upsert_champion", self._upsert_champion, champion_id, champion_name)

    def _get_champion_by_id(self, champion_id: int) -> Champion | None:
        row = (
            self._get_connection()
            .execute("SELECT * FROM champions WHERE champion_id = ?", (champion_id,))
            .fetchone()
        )
        return Champion.model_validate(dict(row)) if row else None

    async def get_champion_by_id(self, champion_id: int) -> Champion | None:
        return await self._run("get_champion_by_id", self._get_champion_by_id, champion_id)

    # ------------------------------------------------------------------
    # Notification queue
    # ------------------------------------------------------------------

    def _insert_notification_event(self, event: NewNotificationEvent) -> NotificationEvent:
        record = NotificationEvent(id=uuid4(), created_at=self._clock(), **event.model_dump())
        values = record.model_dump(mode="python")
        values["event_type"] = record.event_type.value
        with self._writer() as conn:
            conn.execute(_insert_sql("notification_queue", list(values)), _params(values))
        return record

    async def insert_notification_event(self, event: NewNotificationEvent) -> NotificationEvent:
        return await self._run("insert_notification_event", self._insert_notification_event, event)

    def _get_pending_events(self) -> list[NotificationEvent]:
        rows = (
            self._get_connection()
            .execute("SELECT * FROM notification_queue WHERE processed = 0 ORDER BY created_at, rowid")
            .fetchall()
        )
        return [NotificationEvent.model_validate(dict(r)) for r in rows]

    async def get_pending_notification_events(self) -> list[NotificationEvent]:
        return await self._run("get_pending_notification_events", self._get_pending_events)

    def _mark_processed(self, event_ids: Sequence[UUID]) -> None:
        placeholders = ", ".join("?" for _ in event_ids)
        with self._writer() as conn:
            conn.execute(
                f"UPDATE notification_queue SET processed = 1, processed_at = ? "
                f"WHERE processed = 0 AND id IN ({placeholders})",
                [_ts(self._clock()), *(str(i) for i in event_ids)],
            )

    async def mark_notifications_processed(self, event_ids: Sequence[UUID]) -> None:
        if not event_ids:
            return
        await self._run("mark_notifications_processed", self._mark_processed, list(event_ids))
