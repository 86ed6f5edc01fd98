"""Batch queued events into grouped notifications.

Events are only picked up once they are older than the grace period, so
that several tracked summoners entering or leaving the same game end up
in a single message.  A group is marked processed only after its message
was delivered; a failed group stays queued and is retried next cycle.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from lolwatch._timing import sleep_until_stopped
from lolwatch.config import WatchConfig
from lolwatch.exceptions import DeliveryError, StorageError
from lolwatch.models import EventType, NotificationEvent, Summoner, utcnow
from lolwatch.notification.discord import Notifier
from lolwatch.storage.base import Repository

_logger = logging.getLogger(__name__)

GroupKey = tuple[EventType, str]


@dataclass(slots=True)
class ProcessingReport:
    """Outcome of one processing cycle."""

    delivered: int = 0
    failed: int = 0
    deferred: int = 0


class NotificationProcessor:
    def __init__(
        self,
        repository: Repository,
        notifier: Notifier,
        *,
        interval: float = 5.0,
        grace_period: float = 30.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._notifier = notifier
        self._interval = interval
        self._grace_period = timedelta(seconds=grace_period)
        self._clock = clock or utcnow

    @classmethod
    def from_config(cls, config: WatchConfig, repository: Repository, notifier: Notifier) -> NotificationProcessor:
        return cls(
            repository,
            notifier,
            interval=config.notification_interval,
            grace_period=config.grace_period,
        )

    def _group(
        self, events: Sequence[NotificationEvent], report: ProcessingReport
    ) -> dict[GroupKey, list[NotificationEvent]]:
        now = self._clock()
        groups: dict[GroupKey, list[NotificationEvent]] = {}
        for event in events:
            if now - event.created_at < self._grace_period:
                report.deferred += 1
                continue
            key = event.correlation_key
            if key is None:
                _logger.warning("Skipping %s event %s without a match id", event.event_type, event.id)
                continue
            groups.setdefault((event.event_type, key), []).append(event)
        return groups

    async def _resolve_summoners(self, events: Sequence[NotificationEvent]) -> list[Summoner]:
        known = {s.id: s for s in await self._repository.get_all_summoners()}
        ordered: dict[UUID, Summoner] = {}
        for event in events:
            summoner = known.get(event.summoner_id)
            if summoner is not None:
                ordered.setdefault(summoner.id, summoner)
        return list(ordered.values())

    async def _deliver(self, event_type: EventType, events: list[NotificationEvent]) -> None:
        summoners = await self._resolve_summoners(events)
        if event_type is EventType.GAME_STARTED:
            await self._notifier.send_game_started(summoners, events)
        else:
            await self._notifier.send_game_ended(summoners, events)
        await self._repository.mark_notifications_processed([e.id for e in events])

    async def process_pending_events(self) -> ProcessingReport:
        """Run one cycle: group aged events and deliver one message per group."""
        report = ProcessingReport()
        events = await self._repository.get_pending_notification_events()
        if not events:
            return report

        for (event_type, key), group in self._group(events, report).items():
            try:
                await self._deliver(event_type, group)
            except (DeliveryError, StorageError):
                report.failed += 1
                _logger.error("Failed to send grouped %s notification for %s", event_type, key, exc_info=True)
                continue
            report.delivered += 1
            _logger.info(
                "Sent grouped %s notification for %s with %d players",
                event_type,
                key,
                len(group),
            )
        return report

    async def run(self, stop: asyncio.Event) -> None:
        """Process pending events every ``interval`` seconds until *stop* is set."""
        _logger.info("Notification processor started (interval=%.1fs)", self._interval)
        while not stop.is_set():
            try:
                await self.process_pending_events()
            except Exception:
                _logger.exception("Error processing notification events")
            if await sleep_until_stopped(stop, self._interval):
                break
        _logger.info("Notification processor stopped")
