"""Backoff helpers for hard fetch failures."""

from __future__ import annotations

from typing import Iterator

from hashbridge.core.config import BackoffConfig


def backoff_delays(config: BackoffConfig) -> Iterator[float]:
    """Yield exponentially growing delays in seconds, capped at max_seconds."""

    delay = config.initial_seconds
    while True:
        yield min(delay, config.max_seconds)
        delay = min(delay * 2, config.max_seconds)
