"""Run one poll loop per summoner plus the notification processor."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Sequence

from lolwatch._timing import sleep_until_stopped
from lolwatch.models import Summoner
from lolwatch.notification.processor import NotificationProcessor
from lolwatch.tracker import GameTracker

_logger = logging.getLogger(__name__)


class Supervisor:
    """Owns the service tasks.

    Each summoner gets its own task running ``poll -> wait -> repeat``, so
    one summoner's slow or failing poll never delays another.  Errors are
    logged per cycle; a task that still dies is logged when the supervisor
    collects it, without cancelling its siblings.
    """

    def __init__(
        self,
        tracker: GameTracker,
        processor: NotificationProcessor,
        summoners: Sequence[Summoner],
        *,
        polling_interval: float = 180.0,
        poll_jitter: float = 0.0,
    ) -> None:
        self._tracker = tracker
        self._processor = processor
        self._summoners = list(summoners)
        self._polling_interval = polling_interval
        self._poll_jitter = poll_jitter

    async def poll_all_once(self) -> None:
        """Poll every summoner once, concurrently, logging any failure."""
        results = await asyncio.gather(
            *(self._tracker.poll_summoner(s) for s in self._summoners),
            return_exceptions=True,
        )
        for summoner, result in zip(self._summoners, results):
            if isinstance(result, BaseException):
                _logger.error("Error polling %s", summoner.display_name, exc_info=result)

    async def _poll_loop(self, summoner: Summoner, stop: asyncio.Event) -> None:
        if self._poll_jitter > 0 and await sleep_until_stopped(stop, random.uniform(0, self._poll_jitter)):
            return
        _logger.info("Tracking %s every %.0fs", summoner.display_name, self._polling_interval)
        while not stop.is_set():
            try:
                change = await self._tracker.poll_summoner(summoner)
                _logger.debug("Poll %s -> %s", summoner.display_name, type(change).__name__)
            except Exception:
                _logger.exception("Error polling %s", summoner.display_name)
            if await sleep_until_stopped(stop, self._polling_interval):
                break

    async def run(self, stop: asyncio.Event) -> None:
        """Run every task until *stop* is set and all of them have returned."""
        tasks = [
            asyncio.create_task(self._poll_loop(s, stop), name=f"poll:{s.display_name}") for s in self._summoners
        ]
        tasks.append(asyncio.create_task(self._processor.run(stop), name="notifications"))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for task, result in zip(tasks, results):
            if isinstance(result, BaseException):
                _logger.error("Task %s crashed", task.get_name(), exc_info=result)
        _logger.info("Supervisor stopped")
