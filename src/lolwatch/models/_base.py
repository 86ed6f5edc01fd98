"""Base models for Riot API payloads and stored records.

Every upstream payload model inherits from :class:`RiotBaseModel` which
provides:

* ``alias_generator=to_camel`` so the camelCase Riot keys map
  automatically to snake_case fields.
* ``extra="ignore"`` so the many fields lolwatch does not use are dropped.

Stored rows inherit from :class:`RecordModel`; they are plain frozen
models whose field names match the database columns one to one.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_riot_timestamp(value: Any) -> datetime | None:
    """Convert a Riot epoch timestamp (seconds **or** milliseconds) to a UTC datetime.

    Riot reports ``0`` for games that are still loading; that and ``None``
    map to ``None``.  Datetimes and ISO strings pass through untouched.
    """
    if value is None or isinstance(value, (datetime, str)):
        return value
    ts = int(value)
    if ts <= 0:
        return None
    if ts >= _MS_THRESHOLD:
        return datetime.fromtimestamp(ts / 1000, tz=UTC)
    return datetime.fromtimestamp(ts, tz=UTC)


RiotTimestamp = Annotated[datetime | None, BeforeValidator(parse_riot_timestamp)]
"""Annotated type that coerces Riot epoch ints (seconds or ms) to UTC datetimes."""


class RiotBaseModel(BaseModel):
    """Base for Riot API response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class RecordModel(BaseModel):
    """Base for rows persisted by a repository."""

    model_config = ConfigDict(frozen=True, extra="ignore")
