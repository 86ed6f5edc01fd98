"""Render grouped notification events as Discord embeds.

Embeds are plain dicts in the Discord REST API shape; the notifier posts
them unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from lolwatch._constants import queue_type_name
from lolwatch.models import NotificationEvent, Summoner, utcnow

COLOUR_STARTED = 0x3498DB
COLOUR_WIN = 0x2ECC71
COLOUR_LOSS = 0xE74C3C
COLOUR_MIXED = 0xF1C40F


def format_list(items: Sequence[str]) -> str:
    """Join names as ``"A"``, ``"A and B"`` or ``"A, B, and C"``."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} and {items[1]}"
    return f"{', '.join(items[:-1])}, and {items[-1]}"


def format_stats_line(cs: int, gold: int, damage: int, game_duration_secs: int) -> str:
    minutes = game_duration_secs / 60
    cs_per_min = cs / minutes if minutes > 0 else 0.0
    gold_per_min = gold / minutes if minutes > 0 else 0.0
    dmg = f"{damage / 1000:.1f}k" if damage > 1000 else str(damage)
    return f"{cs_per_min:.1f} CS/min · {gold_per_min:.0f} GPM · {dmg} dmg"


def format_enemy_comparison(event: NotificationEvent) -> str:
    """Lane opponent stats, or a placeholder when there is no role data."""
    if (
        event.enemy_champion_name is None
        or event.enemy_cs is None
        or event.enemy_gold is None
        or event.enemy_damage is None
    ):
        return "vs Unknown (no role data)"
    stats = format_stats_line(event.enemy_cs, event.enemy_gold, event.enemy_damage, event.game_duration_secs or 0)
    return f"{event.enemy_champion_name} ({stats})"


def _footer(game_mode: str, queue: str | None, *, featured: bool = False) -> str:
    parts = ["League of Legends", game_mode]
    if queue is not None:
        parts.append(queue)
    text = " · ".join(parts)
    return f"{text} (Featured)" if featured else text


def _events_by_summoner(events: Sequence[NotificationEvent]) -> dict[Any, NotificationEvent]:
    by_summoner: dict[Any, NotificationEvent] = {}
    for event in events:
        by_summoner.setdefault(event.summoner_id, event)
    return by_summoner


def format_grouped_game_started(
    summoners: Sequence[Summoner],
    events: Sequence[NotificationEvent],
    *,
    now: datetime | None = None,
) -> dict[str, Any]:
    """One embed announcing that *summoners* started the same game."""
    first = events[0] if events else None
    game_mode = first.game_mode if first else "UNKNOWN"
    queue = queue_type_name(first.queue_id if first else None)
    by_summoner = _events_by_summoner(events)

    names = [s.game_name for s in summoners]
    fields = []
    for summoner in summoners:
        event = by_summoner.get(summoner.id)
        fields.append(
            {
                "name": summoner.display_name,
                "value": event.champion_name if event and event.champion_name else "Unknown",
                "inline": True,
            }
        )

    return {
        "title": "🎮 Game Started!",
        "description": f"{format_list(names)} started a {game_mode} game ({queue})",
        "color": COLOUR_STARTED,
        "fields": fields,
        "footer": {"text": _footer(game_mode, queue)},
        "timestamp": (now or utcnow()).isoformat(),
    }


def format_grouped_game_ended(
    summoners: Sequence[Summoner],
    events: Sequence[NotificationEvent],
    *,
    now: datetime | None = None,
) -> dict[str, Any]:
    """One embed with the outcome of a finished match for *summoners*.

    Colour is green when everyone won, red when everyone lost and yellow
    for a mixed group (e.g. tracked summoners on opposite teams).
    """
    wins = sum(1 for e in events if e.win)
    losses = len(events) - wins
    if losses == 0:
        colour = COLOUR_WIN
    elif wins == 0:
        colour = COLOUR_LOSS
    else:
        colour = COLOUR_MIXED

    first = events[0] if events else None
    game_mode = first.game_mode if first else "UNKNOWN"
    featured = bool(first and first.is_featured_mode)
    queue = queue_type_name(first.queue_id) if first and first.queue_id is not None else None

    if featured:
        description = f"{game_mode} featured mode ended! Match history may take a bit to update."
    else:
        description = f"{game_mode} game ended! Check your stats."

    by_summoner = _events_by_summoner(events)
    fields: list[dict[str, Any]] = []
    for summoner in summoners:
        event = by_summoner.get(summoner.id)
        if event is None:
            continue
        won = bool(event.win)
        kda = f"{event.kills or 0}/{event.deaths or 0}/{event.assists or 0}"
        role = event.role or "Unknown"
        fields.extend(
            [
                {
                    "name": f"{'🏆' if won else '💔'} {summoner.game_name}",
                    "value": f"💎 {event.champion_name} · {role} · {'W' if won else 'L'} {kda}",
                    "inline": True,
                },
                {
                    "name": "📊 Stats",
                    "value": format_stats_line(
                        event.total_cs or 0,
                        event.total_gold or 0,
                        event.total_damage or 0,
                        event.game_duration_secs or 0,
                    ),
                    "inline": True,
                },
                {"name": "⚔️ vs", "value": format_enemy_comparison(event), "inline": True},
            ]
        )

    return {
        "title": "Game Won!" if wins > losses else "Game Lost!",
        "description": description,
        "color": colour,
        "fields": fields,
        "footer": {"text": _footer(game_mode, queue, featured=featured)},
        "timestamp": (now or utcnow()).isoformat(),
    }
