from __future__ import annotations

import asyncio

from hashbridge.core.dispatcher import Dispatcher
from hashbridge.core.errors import DeliverError
from hashbridge.core.matchers import HashtagMatcher
from hashbridge.core.models import Entity, EntityKind, Message, Update
from hashbridge.core.routes import ForwardRoute


class FakeDestination:
    def __init__(self) -> None:
        self.delivered: list[str] = []

    async def deliver(self, text: str) -> None:
        self.delivered.append(text)


class FailingDestination:
    def __init__(self, error: Exception) -> None:
        self._error = error
        self.calls = 0

    async def deliver(self, text: str) -> None:
        self.calls += 1
        raise self._error


class ExplodingMatcher:
    def matches(self, message: Message) -> bool:
        raise RuntimeError("boom")


def _tagged_update(update_id: int, text: str, tag: str) -> Update:
    offset = text.index(tag)
    message = Message(text=text, entities=(Entity(EntityKind.HASHTAG, offset, len(tag)),))
    return Update(id=update_id, kind="message", message=message)


def test_forwards_whole_message_text() -> None:
    destination = FakeDestination()
    dispatcher = Dispatcher([ForwardRoute("standup", HashtagMatcher("#standup"), destination)])

    summary = asyncio.run(dispatcher.dispatch([_tagged_update(1, "daily #standup update", "#standup")]))

    assert destination.delivered == ["daily #standup update"]
    assert summary.delivered == 1
    assert summary.failed == 0


def test_only_matching_route_receives_delivery() -> None:
    standup = FakeDestination()
    retro = FakeDestination()
    dispatcher = Dispatcher(
        [
            ForwardRoute("standup", HashtagMatcher("#standup"), standup),
            ForwardRoute("retro", HashtagMatcher("#retro"), retro),
        ]
    )

    asyncio.run(dispatcher.dispatch([_tagged_update(1, "daily #standup update", "#standup")]))

    assert standup.delivered == ["daily #standup update"]
    assert retro.delivered == []


def test_all_matching_routes_fire() -> None:
    notes = FakeDestination()
    archive = FakeDestination()
    dispatcher = Dispatcher(
        [
            ForwardRoute("notes", HashtagMatcher("#standup"), notes),
            ForwardRoute("archive", HashtagMatcher("#standup"), archive),
        ]
    )

    asyncio.run(dispatcher.dispatch([_tagged_update(1, "#standup done", "#standup")]))

    assert notes.delivered == ["#standup done"]
    assert archive.delivered == ["#standup done"]


def test_non_message_updates_are_skipped() -> None:
    destination = FakeDestination()
    dispatcher = Dispatcher([ForwardRoute("standup", HashtagMatcher("#standup"), destination)])
    batch = [
        Update(id=1, kind="edited_message"),
        Update(id=2, kind="callback_query"),
        _tagged_update(3, "#standup ok", "#standup"),
    ]

    summary = asyncio.run(dispatcher.dispatch(batch))

    assert summary.updates == 3
    assert summary.messages == 1
    assert destination.delivered == ["#standup ok"]


def test_failed_delivery_does_not_stop_other_routes_or_updates() -> None:
    failing = FailingDestination(DeliverError("page is archived"))
    crashing = FailingDestination(ValueError("bug"))
    healthy = FakeDestination()
    dispatcher = Dispatcher(
        [
            ForwardRoute("broken", HashtagMatcher("#standup"), failing),
            ForwardRoute("crashing", HashtagMatcher("#standup"), crashing),
            ForwardRoute("healthy", HashtagMatcher("#standup"), healthy),
        ]
    )
    batch = [
        _tagged_update(1, "first #standup", "#standup"),
        _tagged_update(2, "second #standup", "#standup"),
    ]

    summary = asyncio.run(dispatcher.dispatch(batch))

    assert failing.calls == 2
    assert crashing.calls == 2
    assert healthy.delivered == ["first #standup", "second #standup"]
    assert summary.failed == 4
    assert summary.delivered == 2


def test_raising_matcher_is_treated_as_no_match() -> None:
    destination = FakeDestination()
    dispatcher = Dispatcher(
        [
            ForwardRoute("bad", ExplodingMatcher(), FakeDestination()),
            ForwardRoute("standup", HashtagMatcher("#standup"), destination),
        ]
    )

    asyncio.run(dispatcher.dispatch([_tagged_update(1, "#standup", "#standup")]))

    assert destination.delivered == ["#standup"]
