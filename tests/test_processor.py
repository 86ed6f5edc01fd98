from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID

import pytest
from conftest import FakeClock, make_game, make_result

from lolwatch.exceptions import DeliveryError
from lolwatch.models import NewNotificationEvent, NotificationEvent, Summoner
from lolwatch.notification.processor import NotificationProcessor
from lolwatch.storage.memory import InMemoryRepository


@dataclass
class RecordingNotifier:
    started: list[tuple[list[str], list[UUID]]] = field(default_factory=list)
    ended: list[tuple[list[str], list[UUID]]] = field(default_factory=list)
    fail: bool = False

    async def send_game_started(self, summoners: Sequence[Summoner], events: Sequence[NotificationEvent]) -> None:
        if self.fail:
            raise DeliveryError("HTTP 503", status_code=503)
        self.started.append(([s.game_name for s in summoners], [e.id for e in events]))

    async def send_game_ended(self, summoners: Sequence[Summoner], events: Sequence[NotificationEvent]) -> None:
        if self.fail:
            raise DeliveryError("HTTP 503", status_code=503)
        self.ended.append(([s.game_name for s in summoners], [e.id for e in events]))


async def _summoners(repository: InMemoryRepository) -> tuple[Summoner, Summoner, Summoner]:
    a = await repository.upsert_summoner("puuid-a", "Alpha", "EUW", "euw1")
    b = await repository.upsert_summoner("puuid-b", "Bravo", "EUW", "euw1")
    c = await repository.upsert_summoner("puuid-c", "Charlie", "EUW", "euw1")
    return a, b, c


async def _started(repository: InMemoryRepository, summoner: Summoner, game_id: int) -> NotificationEvent:
    return await repository.insert_notification_event(
        NewNotificationEvent.game_started(summoner.id, make_game(game_id), "Ahri")
    )


@pytest.mark.asyncio
async def test_events_inside_grace_window_wait_for_the_next_cycle(
    repository: InMemoryRepository, clock: FakeClock
) -> None:
    a, b, c = await _summoners(repository)
    clock.set(0)
    e1 = await _started(repository, a, 42)
    clock.set(5)
    e2 = await _started(repository, b, 42)
    clock.set(35)
    e3 = await _started(repository, c, 42)
    notifier = RecordingNotifier()
    processor = NotificationProcessor(repository, notifier, grace_period=30.0, clock=clock)

    clock.set(40)
    report = await processor.process_pending_events()

    assert report.delivered == 1
    assert report.deferred == 1
    assert notifier.started == [(["Alpha", "Bravo"], [e1.id, e2.id])]
    pending = await repository.get_pending_notification_events()
    assert [e.id for e in pending] == [e3.id]

    clock.set(66)
    report = await processor.process_pending_events()

    assert report.delivered == 1
    assert notifier.started[1] == (["Charlie"], [e3.id])
    assert await repository.get_pending_notification_events() == []


@pytest.mark.asyncio
async def test_started_and_ended_events_for_the_same_game_are_not_merged(
    repository: InMemoryRepository, clock: FakeClock
) -> None:
    a, b, _ = await _summoners(repository)
    await _started(repository, a, 42)
    await repository.insert_notification_event(NewNotificationEvent.game_ended(b.id, make_result(42)))
    notifier = RecordingNotifier()
    processor = NotificationProcessor(repository, notifier, grace_period=30.0, clock=clock)

    clock.advance(31)
    report = await processor.process_pending_events()

    assert report.delivered == 2
    assert len(notifier.started) == 1
    assert len(notifier.ended) == 1


@pytest.mark.asyncio
async def test_ended_events_are_grouped_by_match_id(repository: InMemoryRepository, clock: FakeClock) -> None:
    a, b, c = await _summoners(repository)
    for summoner, win in ((a, True), (b, False)):
        event = NewNotificationEvent.game_ended(summoner.id, make_result(7, win=win))
        await repository.insert_notification_event(event)
    await repository.insert_notification_event(NewNotificationEvent.game_ended(c.id, make_result(8)))
    notifier = RecordingNotifier()
    processor = NotificationProcessor(repository, notifier, grace_period=0.0, clock=clock)

    await processor.process_pending_events()

    assert sorted(names for names, _ in notifier.ended) == [["Alpha", "Bravo"], ["Charlie"]]


@pytest.mark.asyncio
async def test_failed_delivery_leaves_events_for_retry(repository: InMemoryRepository, clock: FakeClock) -> None:
    a, b, _ = await _summoners(repository)
    await _started(repository, a, 42)
    await _started(repository, b, 42)
    notifier = RecordingNotifier(fail=True)
    processor = NotificationProcessor(repository, notifier, grace_period=30.0, clock=clock)
    clock.advance(31)

    report = await processor.process_pending_events()

    assert report.failed == 1
    assert report.delivered == 0
    pending = await repository.get_pending_notification_events()
    assert len(pending) == 2

    notifier.fail = False
    clock.advance(5)
    report = await processor.process_pending_events()

    assert report.delivered == 1
    assert notifier.started == [(["Alpha", "Bravo"], [e.id for e in pending])]
    assert await repository.get_pending_notification_events() == []
    assert all(e.processed and e.processed_at == clock.now for e in repository.events.values())


@pytest.mark.asyncio
async def test_one_failing_group_does_not_block_others(repository: InMemoryRepository, clock: FakeClock) -> None:
    a, b, _ = await _summoners(repository)
    await _started(repository, a, 42)
    await repository.insert_notification_event(NewNotificationEvent.game_ended(b.id, make_result(41)))

    class StartedFails(RecordingNotifier):
        async def send_game_started(self, summoners, events) -> None:
            raise DeliveryError("HTTP 500", status_code=500)

    notifier = StartedFails()
    processor = NotificationProcessor(repository, notifier, grace_period=0.0, clock=clock)

    report = await processor.process_pending_events()

    assert report.failed == 1
    assert report.delivered == 1
    pending = await repository.get_pending_notification_events()
    assert [e.game_id for e in pending] == [42]


@pytest.mark.asyncio
async def test_processed_events_are_never_sent_twice(repository: InMemoryRepository, clock: FakeClock) -> None:
    a, _, _ = await _summoners(repository)
    await _started(repository, a, 42)
    notifier = RecordingNotifier()
    processor = NotificationProcessor(repository, notifier, grace_period=0.0, clock=clock)

    await processor.process_pending_events()
    await processor.process_pending_events()

    assert len(notifier.started) == 1


@pytest.mark.asyncio
async def test_same_summoner_twice_in_a_group_is_listed_once(repository: InMemoryRepository, clock: FakeClock) -> None:
    a, _, _ = await _summoners(repository)
    await _started(repository, a, 42)
    await _started(repository, a, 42)
    notifier = RecordingNotifier()
    processor = NotificationProcessor(repository, notifier, grace_period=0.0, clock=clock)

    await processor.process_pending_events()

    names, ids = notifier.started[0]
    assert names == ["Alpha"]
    assert len(ids) == 2


@pytest.mark.asyncio
async def test_run_returns_once_stop_is_set(repository: InMemoryRepository, clock: FakeClock) -> None:
    stop = asyncio.Event()
    stop.set()
    processor = NotificationProcessor(repository, RecordingNotifier(), interval=3600.0, clock=clock)

    await asyncio.wait_for(processor.run(stop), timeout=1.0)
