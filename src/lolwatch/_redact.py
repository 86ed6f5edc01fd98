"""Helpers for safe debug logging.

lolwatch carries two long-lived credentials, the Riot API key and the
Discord bot token.  Request headers and the loaded configuration pass
through :func:`redact_for_log` before they reach DEBUG logs.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

# A key is secret when its lowercased name contains one of these.
_SECRET_MARKERS: tuple[str, ...] = ("token", "api_key", "authorization", "password", "secret", "cookie")

REDACTED = "<redacted>"
_MAX_DEPTH = 20


def is_secret_key(key: object) -> bool:
    name = str(key).lower().replace("-", "_")
    return any(marker in name for marker in _SECRET_MARKERS)


def _shorten(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}…<truncated>"


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a copy of *value* with credentials masked and long strings cut.

    Mappings, pydantic models and dataclasses are walked recursively.
    An empty secret is kept as is so a missing credential stays visible.
    """

    def walk(item: Any, depth: int) -> Any:
        if depth > _MAX_DEPTH:
            return "<max-depth>"
        if item is None or isinstance(item, (bool, int, float)):
            return item
        if isinstance(item, str):
            return _shorten(item, max_string)
        if isinstance(item, (bytes, bytearray)):
            return f"<bytes:{len(item)}b>"
        if isinstance(item, BaseModel):
            item = item.model_dump()
        elif dataclasses.is_dataclass(item) and not isinstance(item, type):
            item = dataclasses.asdict(item)
        if isinstance(item, Mapping):
            return {
                str(k): (REDACTED if v else v) if is_secret_key(k) else walk(v, depth + 1) for k, v in item.items()
            }
        if isinstance(item, (list, tuple, set, frozenset)):
            return [walk(v, depth + 1) for v in item]
        return repr(item)

    return walk(value, 0)
