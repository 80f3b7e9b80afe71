from __future__ import annotations

import pytest

from hashbridge.core.config import RouteConfig
from hashbridge.core.matchers import HashtagMatcher
from hashbridge.core.routes import build_routes


class FakeDestination:
    async def deliver(self, text: str) -> None:
        pass


def test_build_routes_preserves_declaration_order() -> None:
    notes = FakeDestination()
    archive = FakeDestination()
    routes = build_routes(
        [
            RouteConfig(name="retro", hashtag="#retro", destination="archive"),
            RouteConfig(name="standup", hashtag="#standup", destination="notes"),
        ],
        {"notes": notes, "archive": archive},
    )

    assert [route.name for route in routes] == ["retro", "standup"]
    assert routes[0].destination is archive
    assert isinstance(routes[1].matcher, HashtagMatcher)
    assert routes[1].matcher.tag == "#standup"


def test_unknown_destination_fails() -> None:
    with pytest.raises(ValueError):
        build_routes([RouteConfig(name="x", hashtag="#x", destination="missing")], {})


def test_tag_without_hash_is_kept_verbatim(caplog) -> None:
    routes = build_routes([RouteConfig(name="x", hashtag="standup", destination="d")], {"d": FakeDestination()})

    assert routes[0].matcher.tag == "standup"
    assert "never match" in caplog.text
