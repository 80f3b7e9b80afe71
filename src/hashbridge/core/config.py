"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_POLL_TIMEOUT = 60


@dataclass(frozen=True)
class BackoffConfig:
    """Delay policy applied after hard fetch failures.

    ``initial_seconds == 0`` disables the growing delay; a ``retry_after``
    requested by the source is still honoured.
    """

    initial_seconds: float = 1.0
    max_seconds: float = 60.0


@dataclass(frozen=True)
class PollConfig:
    """Long-poll settings for the update poller."""

    timeout_seconds: int = DEFAULT_POLL_TIMEOUT
    initial_offset: int = 0
    backoff: BackoffConfig = field(default_factory=BackoffConfig)


@dataclass(frozen=True)
class RouteConfig:
    """One forwarding rule as declared in config.json."""

    name: str
    hashtag: str
    destination: str
