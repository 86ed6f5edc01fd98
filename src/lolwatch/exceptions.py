"""Custom exception hierarchy for lolwatch."""

from __future__ import annotations


class LolWatchError(Exception):
    """Base exception for all lolwatch errors."""


class WatchConfigError(LolWatchError):
    """Invalid or missing configuration."""


class StorageError(LolWatchError):
    """Repository operation failed.

    Wraps whatever the storage backend raised (``sqlite3.Error`` for the
    SQLite repository) so callers only ever handle one storage error kind.
    """

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)


class SourceError(LolWatchError):
    """Upstream Riot API read failed (network, non-2xx, invalid JSON).

    A missing resource (HTTP 404) is not an error: read methods return
    ``None`` for it.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class RiotAccountNotFoundError(SourceError):
    """No Riot account exists for the given ``game_name#tag_line``."""


class RiotRateLimitError(SourceError):
    """Riot API answered 429.

    ``retry_after`` carries the server's ``Retry-After`` hint in seconds
    when one was sent.  lolwatch does not throttle on its own; the error
    is logged and the next poll cycle simply tries again.
    """

    def __init__(
        self,
        message: str,
        *,
        retry_after: float | None = None,
        status_code: int | None = 429,
        endpoint: str = "",
    ) -> None:
        self.retry_after = retry_after
        super().__init__(message, status_code=status_code, endpoint=endpoint)


class DeliveryError(LolWatchError):
    """A notification could not be delivered to the chat channel."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
