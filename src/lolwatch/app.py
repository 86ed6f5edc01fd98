"""Service bootstrap and command line entry point."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
from collections.abc import Sequence

import aiohttp

from lolwatch._redact import redact_for_log
from lolwatch.config import WatchConfig
from lolwatch.exceptions import LolWatchError, SourceError, StorageError
from lolwatch.models import Summoner
from lolwatch.notification.discord import DiscordNotifier, LogNotifier, Notifier
from lolwatch.notification.processor import NotificationProcessor
from lolwatch.riot.client import RiotClient, SourceClient
from lolwatch.storage.base import Repository
from lolwatch.storage.memory import InMemoryRepository
from lolwatch.storage.sqlite import SqliteRepository
from lolwatch.supervisor import Supervisor
from lolwatch.tracker import GameTracker

_logger = logging.getLogger(__name__)


async def sync_champions(source: SourceClient, repository: Repository) -> int:
    """Refresh the champion name cache. Best effort: failures are logged."""
    try:
        champions = await source.get_all_champions()
        for champion in champions:
            await repository.upsert_champion(champion.champion_id, champion.champion_name)
    except (SourceError, StorageError):
        _logger.warning("Could not sync champions, names will fall back to ids", exc_info=True)
        return 0
    _logger.info("Synced %d champions", len(champions))
    return len(champions)


async def register_summoners(config: WatchConfig, source: SourceClient, repository: Repository) -> list[Summoner]:
    """Resolve and store every configured summoner.

    A summoner that cannot be resolved is logged and skipped.
    """
    registered: list[Summoner] = []
    for entry in config.summoners:
        try:
            account = await source.get_account_by_riot_id(entry.name, entry.tag)
            summoner = await repository.upsert_summoner(
                account.puuid,
                account.game_name or entry.name,
                account.tag_line or entry.tag,
                config.default_region,
            )
        except (SourceError, StorageError):
            _logger.error("Could not register summoner %s", entry.riot_id, exc_info=True)
            continue
        _logger.info("Registered summoner %s", summoner.display_name)
        registered.append(summoner)
    return registered


async def run(
    config: WatchConfig,
    *,
    dry_run: bool = False,
    once: bool = False,
    stop: asyncio.Event | None = None,
) -> None:
    """Start the service and run it until *stop* is set (or one cycle with *once*)."""
    config.validate(require_discord=not dry_run, require_database=not dry_run)
    _logger.debug("Configuration: %s", redact_for_log(config))
    stop = stop or asyncio.Event()

    repository: Repository
    if dry_run:
        repository = InMemoryRepository()
    else:
        repository = SqliteRepository(config.database_path)

    try:
        async with contextlib.AsyncExitStack() as stack:
            http = await stack.enter_async_context(aiohttp.ClientSession())
            source = await stack.enter_async_context(RiotClient(config, session=http))
            notifier: Notifier
            if dry_run:
                notifier = LogNotifier()
            else:
                notifier = await stack.enter_async_context(
                    DiscordNotifier(
                        config.discord_bot_token,
                        config.discord_channel_id,
                        session=http,
                        timeout=config.request_timeout,
                    )
                )

            await sync_champions(source, repository)
            summoners = await register_summoners(config, source, repository)
            if not summoners:
                _logger.warning("No summoners registered, only pending notifications will be processed")

            tracker = GameTracker.from_config(config, source, repository)
            processor = NotificationProcessor.from_config(config, repository, notifier)
            supervisor = Supervisor(
                tracker,
                processor,
                summoners,
                polling_interval=config.polling_interval,
                poll_jitter=config.poll_jitter,
            )

            if once:
                await supervisor.poll_all_once()
                # Nothing would age past the grace window before exit.
                flush = NotificationProcessor(repository, notifier, grace_period=0.0)
                report = await flush.process_pending_events()
                _logger.info(
                    "Single cycle done: delivered=%d failed=%d deferred=%d",
                    report.delivered,
                    report.failed,
                    report.deferred,
                )
                return

            await supervisor.run(stop)
    finally:
        if isinstance(repository, SqliteRepository):
            repository.close()


async def _run_until_signalled(config: WatchConfig, *, dry_run: bool, once: bool) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)
    await run(config, dry_run=dry_run, once=once, stop=stop)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lolwatch",
        description="Post League of Legends game starts and results for a roster of summoners to Discord.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Keep state in memory and log notifications instead of sending them",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Poll every summoner once, send every queued notification without waiting for the grace period, and exit",
    )
    parser.add_argument("--log-level", help="Log level (default: LOG_LEVEL or INFO)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = WatchConfig.from_env()
    except LolWatchError as exc:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        _logger.error("%s", exc)
        return 2

    level = (args.log_level or config.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(_run_until_signalled(config, dry_run=args.dry_run, once=args.once))
    except LolWatchError as exc:
        _logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        pass
    return 0
