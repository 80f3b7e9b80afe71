"""Batch dispatch of fetched updates to forward routes.

This module is integration-agnostic. For each message in a batch, every route
is evaluated in table order and each matching route forwards the full message
text to its destination. A failing route never blocks the remaining routes or
updates of the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from hashbridge.core.errors import DeliverError
from hashbridge.core.models import Message, Update
from hashbridge.core.routes import ForwardRoute

LOGGER = logging.getLogger(__name__)


@dataclass
class DispatchSummary:
    """Counters for one dispatched batch."""

    updates: int = 0
    messages: int = 0
    delivered: int = 0
    failed: int = 0


class Dispatcher:
    """Evaluate every forward route against each message of a batch."""

    def __init__(self, routes: Iterable[ForwardRoute]) -> None:
        self._routes = tuple(routes)

    @property
    def routes(self) -> tuple[ForwardRoute, ...]:
        return self._routes

    async def dispatch(self, batch: Sequence[Update]) -> DispatchSummary:
        """Process one batch in order and return delivery counters."""

        summary = DispatchSummary()
        for update in batch:
            summary.updates += 1
            if not update.is_message:
                LOGGER.debug("Skipping update %s of kind %s", update.id, update.kind)
                continue
            summary.messages += 1
            await self._dispatch_message(update, update.message, summary)
        return summary

    async def _dispatch_message(self, update: Update, message: Message, summary: DispatchSummary) -> None:
        for route in self._routes:
            if not self._route_matches(route, message):
                continue

            LOGGER.info("Update %s matched route %s (%s)", update.id, route.name, route.matcher)
            # The whole message text is forwarded, not only the matched span.
            try:
                await route.destination.deliver(message.text or "")
            except DeliverError as exc:
                summary.failed += 1
                LOGGER.error("Route %s failed to deliver update %s: %s", route.name, update.id, exc)
                continue
            except Exception:
                summary.failed += 1
                LOGGER.exception("Unexpected error delivering update %s via route %s", update.id, route.name)
                continue
            summary.delivered += 1

    @staticmethod
    def _route_matches(route: ForwardRoute, message: Message) -> bool:
        try:
            return route.matcher.matches(message)
        except Exception:
            LOGGER.exception("Matcher for route %s raised, treating as no match", route.name)
            return False
