"""Forward routes and route table construction (core domain)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Tuple

from hashbridge.core.config import RouteConfig
from hashbridge.core.matchers import HashtagMatcher, Matcher
from hashbridge.core.ports import Destination

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForwardRoute:
    """A named (matcher, destination) pair: "if hashtag X, forward to Y"."""

    name: str
    matcher: Matcher
    destination: Destination


def build_routes(
    route_configs: Iterable[RouteConfig],
    destinations: Mapping[str, Destination],
) -> Tuple[ForwardRoute, ...]:
    """Build the ordered route table.

    Declaration order is preserved because the dispatcher evaluates routes in
    table order. Unknown destination names fail here, before polling starts.
    """

    routes = []
    for config in route_configs:
        if config.destination not in destinations:
            raise ValueError(f"Route {config.name!r} refers to unknown destination {config.destination!r}")
        if not config.hashtag.startswith("#"):
            # Telegram hashtag entities always include the leading '#'.
            LOGGER.warning("Route %s tag %r has no leading '#', it will never match", config.name, config.hashtag)
        routes.append(
            ForwardRoute(
                name=config.name,
                matcher=HashtagMatcher(config.hashtag),
                destination=destinations[config.destination],
            )
        )
    return tuple(routes)
