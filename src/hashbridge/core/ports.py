"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the update source, forwarding
destinations and cursor persistence so that the core can be reused with
different backends.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from hashbridge.core.models import Update


class UpdateSource(Protocol):
    """Long-poll access to the messaging source.

    Raises TransportError for connectivity failures and ProtocolError for
    error responses or unusable payloads.
    """

    async def fetch_updates(self, cursor: int, timeout_seconds: int) -> List[Update]:
        ...


class Destination(Protocol):
    """Accept forwarded text and persist it externally.

    Raises DeliverError on failure. Implementations do not retry.
    """

    async def deliver(self, text: str) -> None:
        ...


class CursorStore(Protocol):
    """Persistence for the poll cursor across restarts."""

    def get_cursor(self) -> Optional[int]:
        ...

    def set_cursor(self, cursor: int) -> None:
        ...
