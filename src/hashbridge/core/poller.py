"""Long-poll update loop.

The poller owns the cursor ("smallest update id not yet consumed") and drives
a strictly sequential cycle:

1) fetch updates since the cursor (the only suspension point)
2) dispatch the batch to the routes
3) advance the cursor to max(id) + 1

The cursor moves after dispatch is invoked, not after it succeeds, so a crash
mid-dispatch can re-deliver a batch on restart (at-least-once forwarding).
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Optional

from hashbridge.core.backoff import backoff_delays
from hashbridge.core.config import PollConfig
from hashbridge.core.dispatcher import Dispatcher
from hashbridge.core.errors import ProtocolError, TransportError
from hashbridge.core.ports import CursorStore, UpdateSource

LOGGER = logging.getLogger(__name__)


class PollState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SUCCESS = "success"
    SOFT_FAILURE = "soft_failure"
    HARD_FAILURE = "hard_failure"


class UpdatePoller:
    """Fetch, dispatch and advance, forever."""

    def __init__(
        self,
        source: UpdateSource,
        dispatcher: Dispatcher,
        config: Optional[PollConfig] = None,
        cursor_store: Optional[CursorStore] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._source = source
        self._dispatcher = dispatcher
        self._config = config or PollConfig()
        self._cursor_store = cursor_store
        self._sleep = sleep
        self._state = PollState.IDLE
        self._delays = backoff_delays(self._config.backoff)

        cursor = self._config.initial_offset
        if cursor_store is not None:
            stored = cursor_store.get_cursor()
            if stored is not None:
                cursor = max(cursor, stored)
        self._cursor = cursor

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def state(self) -> PollState:
        return self._state

    async def run_forever(self) -> None:
        """Run poll cycles until the task is cancelled."""

        LOGGER.info(
            "Polling for updates with a timeout of %s seconds from offset %s",
            self._config.timeout_seconds,
            self._cursor,
        )
        while True:
            try:
                await self.poll_once()
            except Exception:
                # Keep the bridge alive; the cursor is untouched unless a batch
                # was already dispatched.
                LOGGER.exception("Unexpected error in poll cycle at offset %s", self._cursor)
                self._state = PollState.IDLE

    async def poll_once(self) -> PollState:
        """Run one fetch/dispatch/advance cycle and return its outcome."""

        self._state = PollState.FETCHING
        LOGGER.debug("Waiting for updates (timeout=%ss, offset=%s)", self._config.timeout_seconds, self._cursor)
        try:
            batch = await self._source.fetch_updates(self._cursor, self._config.timeout_seconds)
        except TransportError as exc:
            LOGGER.debug("Network error while fetching updates: %s", exc)
            return self._finish(PollState.SOFT_FAILURE)
        except ProtocolError as exc:
            LOGGER.warning("Failed to fetch updates: %s", exc)
            self._finish(PollState.HARD_FAILURE)
            await self._back_off(exc)
            return PollState.HARD_FAILURE

        self._delays = backoff_delays(self._config.backoff)
        if not batch:
            return self._finish(PollState.SUCCESS)

        new_cursor = max(update.id for update in batch) + 1
        LOGGER.info("Got %s updates, next offset %s", len(batch), new_cursor)
        try:
            summary = await self._dispatcher.dispatch(batch)
        finally:
            self._advance(new_cursor)
        if summary.delivered or summary.failed:
            LOGGER.info("Batch forwarded: delivered=%s failed=%s", summary.delivered, summary.failed)
        return self._finish(PollState.SUCCESS)

    def _advance(self, new_cursor: int) -> None:
        if new_cursor <= self._cursor:
            return
        self._cursor = new_cursor
        if self._cursor_store is not None:
            self._cursor_store.set_cursor(new_cursor)

    async def _back_off(self, exc: ProtocolError) -> None:
        delay = next(self._delays) if self._config.backoff.initial_seconds > 0 else 0.0
        if exc.retry_after:
            # The API asked for a pause; honour it even with backoff disabled.
            delay = max(delay, float(exc.retry_after))
        if delay <= 0:
            return
        LOGGER.info("Backing off for %.1f seconds before the next fetch", delay)
        await self._sleep(delay)

    def _finish(self, outcome: PollState) -> PollState:
        self._state = PollState.IDLE
        return outcome
