"""Log-only destination for dry runs."""

from __future__ import annotations

import logging

LOGGER = logging.getLogger(__name__)


class LogDestination:
    """Write forwarded text to the application log instead of a remote record."""

    def __init__(self, name: str) -> None:
        self._name = name

    async def deliver(self, text: str) -> None:
        LOGGER.info("[%s] %s", self._name, text)

    def __str__(self) -> str:
        return f"log {self._name}"
