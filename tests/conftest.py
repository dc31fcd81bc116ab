"""Shared test fixtures."""

from datetime import timedelta
from types import SimpleNamespace

import pytest

from schedbot.events.calendar.event import Attendee
from schedbot.events.calendar.event_store import EventStore
from schedbot.events.command_router import CommandRouter
from schedbot.utils.time_utils import utc_time_now


class FakeContext:
    """Stand-in for a discord command context that records replies."""

    def __init__(self, server="Test Server", channel="general",
                 author_id=1001, author_name="alice"):
        self.guild = SimpleNamespace(name=server)
        self.channel = SimpleNamespace(name=channel, id=42)
        self.author = SimpleNamespace(id=author_id, display_name=author_name)
        self.command = "sched"
        self.sent = []

    async def send(self, text=None, embed=None):
        self.sent.append((text, embed))
        return SimpleNamespace(content=text, embed=embed)


@pytest.fixture(name="event_store")
def event_store_fixture(tmp_path) -> EventStore:
    """Event store writing to a temporary directory."""
    return EventStore(str(tmp_path / "data"))


@pytest.fixture(name="channel")
def channel_fixture(event_store: EventStore):
    """Events of a single channel."""
    return event_store.partition("Test Server", "general")


@pytest.fixture(name="router")
def router_fixture(event_store: EventStore) -> CommandRouter:
    return CommandRouter(event_store)


@pytest.fixture(name="future_time")
def future_time_fixture():
    return utc_time_now().replace(microsecond=0) + timedelta(days=1)


@pytest.fixture(name="past_time")
def past_time_fixture():
    return utc_time_now().replace(microsecond=0) - timedelta(days=1)


@pytest.fixture(name="alice")
def alice_fixture() -> Attendee:
    return Attendee(id="1001", name="alice")


@pytest.fixture(name="bob")
def bob_fixture() -> Attendee:
    return Attendee(id="1002", name="bob")


@pytest.fixture(name="fake_context")
def fake_context_fixture() -> FakeContext:
    return FakeContext()
