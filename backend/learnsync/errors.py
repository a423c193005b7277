"""Error taxonomy for the content sync pipeline."""

from __future__ import annotations

from typing import Optional


class ContentSyncError(RuntimeError):
    """Base class for failures observed while syncing dashboard content."""

    kind = "sync"

    def __init__(self, message: str, *, endpoint: Optional[str] = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint


class NetworkError(ContentSyncError):
    """The remote API was unreachable or did not answer before the timeout."""

    kind = "network"


class PayloadError(ContentSyncError):
    """The response body was malformed, had the wrong shape, or reported failure."""

    kind = "payload"


class EmptyResultError(ContentSyncError):
    """A well-formed response contained no eligible entries.

    Never surfaced to users; it only marks that fallback content is shown.
    """

    kind = "empty"


__all__ = [
    "ContentSyncError",
    "EmptyResultError",
    "NetworkError",
    "PayloadError",
]
