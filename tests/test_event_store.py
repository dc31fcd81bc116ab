"""Tests for the event store."""

import asyncio
import os
from datetime import timedelta

import pytest

from schedbot.database import PartitionKey
from schedbot.events.calendar.event import Attendee, Event, ValidationError
from schedbot.events.calendar.event_store import (
    EventNotFoundError, EventStore, smallest_free_id, sweep
)

NO_EVENTS = "There are no events currently scheduled"


class TestSmallestFreeId:
    def test_empty(self):
        assert smallest_free_id({}) == "0"

    def test_fills_gap(self):
        assert smallest_free_id({"0": None, "2": None}) == "1"

    def test_ignores_non_numeric_ids(self):
        assert smallest_free_id({"abc": None, "0": None}) == "1"


def test_sweep_removes_only_past_events(past_time, future_time):
    events = {
        "0": Event.create("0", "old", past_time),
        "1": Event.create("1", "new", future_time),
    }

    assert sweep(events)
    assert list(events) == ["1"]
    assert not sweep(events)


@pytest.mark.asyncio
async def test_create_then_retrieve(channel, future_time):
    created = await channel.create("Raid", future_time)
    retrieved = await channel.retrieve(created.id)

    assert retrieved is not None
    assert retrieved.name == "Raid"
    assert retrieved.time == future_time
    assert retrieved.accepted == []
    assert retrieved.declined == []
    assert retrieved.maybe == []


@pytest.mark.asyncio
async def test_create_in_past_rejected(channel, event_store, past_time):
    with pytest.raises(ValidationError) as excinfo:
        await channel.create("Raid", past_time)

    assert excinfo.value.error_message == "Cannot create an event in the past"
    assert event_store.database.load(channel.key) == {}
    assert await channel.list() == NO_EVENTS


@pytest.mark.asyncio
async def test_create_in_past_keeps_partition(channel, event_store,
                                              future_time, past_time):
    await channel.create("Raid", future_time)
    before = event_store.database.load(channel.key)

    with pytest.raises(ValidationError):
        await channel.create("Too late", past_time)

    assert event_store.database.load(channel.key) == before


@pytest.mark.asyncio
async def test_create_assigns_dense_ids(channel, future_time):
    ids = [
        (await channel.create(f"event {num}", future_time)).id
        for num in range(3)
    ]

    assert ids == ["0", "1", "2"]


@pytest.mark.asyncio
async def test_generate_id_reuses_deleted_id(channel, future_time):
    await channel.store("0", Event.create("0", "first", future_time))
    await channel.store("1", Event.create("1", "second", future_time))

    assert await channel.generate_id() == "2"

    await channel.delete("0")

    assert await channel.generate_id() == "0"


@pytest.mark.asyncio
async def test_generate_id_not_in_use(channel, future_time):
    for event_id in ["0", "1", "3"]:
        await channel.store(event_id, Event.create(event_id, "x", future_time))

    event_id = await channel.generate_id()

    assert event_id == "2"
    assert await channel.retrieve(event_id) is None


@pytest.mark.asyncio
async def test_store_replaces_event(channel, future_time, alice):
    event = Event.create("0", "Raid", future_time)
    await channel.store("0", event)

    event.accept(alice)
    await channel.store("0", event)

    assert (await channel.retrieve("0")).accepted == [alice]


@pytest.mark.asyncio
async def test_store_rejects_mismatched_id(channel, event_store, future_time):
    await channel.store("0", Event.create("0", "Raid", future_time))

    with pytest.raises(ValueError):
        await channel.store("5", Event.create("0", "Chess", future_time))

    assert (await channel.retrieve("0")).name == "Raid"
    assert await channel.retrieve("5") is None
    assert list(event_store.database.read(channel.key)) == ["0"]


@pytest.mark.asyncio
async def test_dot_server_name_stays_in_data_dir(tmp_path, future_time):
    data_dir = tmp_path / "data"
    store = EventStore(str(data_dir))

    await store.partition("..", "general").create("Raid", future_time)
    await store.partition(".", "general").create("Chess", future_time)

    assert os.listdir(tmp_path) == ["data"]
    assert len(os.listdir(data_dir)) == 2
    assert (await store.partition("..", "general").retrieve("0")).name == "Raid"
    assert (await store.partition(".", "general").retrieve("0")).name == "Chess"


@pytest.mark.asyncio
async def test_delete_missing_is_silent(channel, future_time):
    await channel.store("0", Event.create("0", "Raid", future_time))

    await channel.delete("5")

    assert await channel.retrieve("0") is not None


@pytest.mark.asyncio
async def test_remove(channel, future_time):
    await channel.create("Raid", future_time)

    removed = await channel.remove("0")

    assert removed.name == "Raid"
    assert await channel.retrieve("0") is None
    with pytest.raises(EventNotFoundError) as excinfo:
        await channel.remove("0")

    assert excinfo.value.error_message == "No event found with id 0"


@pytest.mark.asyncio
async def test_list_sweeps_and_persists(channel, event_store,
                                        past_time, future_time):
    await channel.store("1", Event.create("1", "new", future_time))
    await channel.store("0", Event.create("0", "old", past_time))
    assert list(event_store.database.read(channel.key)) == ["1", "0"]

    listing = await channel.list()

    assert listing == Event.create("1", "new", future_time).render_summary()
    assert await channel.retrieve("0") is None
    assert list(event_store.database.read(channel.key)) == ["1"]


@pytest.mark.asyncio
async def test_list_empty(channel):
    assert await channel.list() == NO_EVENTS


@pytest.mark.asyncio
async def test_list_fully_expired(channel, event_store, past_time):
    await channel.store("0", Event.create("0", "old", past_time))

    assert await channel.list() == NO_EVENTS
    assert event_store.database.read(channel.key) == {}


@pytest.mark.asyncio
async def test_list_ordered_by_time(channel, future_time):
    await channel.store("0", Event.create("0", "later", future_time))
    await channel.store(
        "1",
        Event.create("1", "sooner", future_time - timedelta(hours=1))
    )

    lines = (await channel.list()).split("\n")

    assert [line.split(":")[0] for line in lines] == ["1", "0"]


@pytest.mark.asyncio
async def test_retrieve_expired_does_not_rewrite(channel, event_store,
                                                 past_time):
    await channel.store("0", Event.create("0", "old", past_time))

    assert await channel.retrieve("0") is None
    assert list(event_store.database.read(channel.key)) == ["0"]


@pytest.mark.asyncio
async def test_respond(channel, future_time, alice, bob):
    await channel.create("Raid", future_time)

    await channel.respond("0", alice, "accept")
    await channel.respond("0", bob, "maybe")
    event = await channel.respond("0", alice, "decline")

    assert event.accepted == []
    assert event.declined == [alice]
    assert event.maybe == [bob]
    assert await channel.retrieve("0") == event


@pytest.mark.asyncio
async def test_respond_missing(channel, alice):
    with pytest.raises(EventNotFoundError):
        await channel.respond("0", alice, "accept")


@pytest.mark.asyncio
async def test_respond_expired(channel, past_time, alice):
    await channel.store("0", Event.create("0", "old", past_time))

    with pytest.raises(EventNotFoundError):
        await channel.respond("0", alice, "accept")


@pytest.mark.asyncio
async def test_partitions_are_independent(event_store, future_time):
    general = event_store.partition("Test Server", "general")
    games = event_store.partition("Test Server", "games")
    other = event_store.partition("Other Server", "general")

    await general.create("Raid", future_time)
    await games.create("Chess", future_time)

    assert (await general.retrieve("0")).name == "Raid"
    assert (await games.retrieve("0")).name == "Chess"
    assert await other.retrieve("0") is None
    assert await other.generate_id() == "0"


@pytest.mark.asyncio
async def test_reload_round_trip(tmp_path, future_time, alice, bob):
    data_dir = str(tmp_path / "data")
    channel = EventStore(data_dir).partition("Test Server", "general")
    carol = Attendee(id="1003", name="carol")

    first = Event.create("0", "Raid", future_time)
    first.accept(alice)
    first.decline(bob)
    second = Event.create("1", "Chess", future_time + timedelta(hours=2))
    second.maybe_attend(carol)
    second.accept(bob)
    third = Event.create("2", "Ünïcode night 🎲", future_time + timedelta(days=3))

    for event in [first, second, third]:
        await channel.store(event.id, event)

    reloaded = EventStore(data_dir).partition("Test Server", "general")
    for event in [first, second, third]:
        loaded = await reloaded.retrieve(event.id)
        assert loaded.save_to_dict() == event.save_to_dict()
        assert loaded.time == event.time


@pytest.mark.asyncio
async def test_concurrent_accepts_not_lost(channel, future_time):
    await channel.create("Raid", future_time)
    attendees = [
        Attendee(id=str(num), name=f"member {num}") for num in range(25)
    ]

    await asyncio.gather(*[
        channel.respond("0", attendee, "accept") for attendee in attendees
    ])

    event = await channel.retrieve("0")
    assert sorted(event.accepted, key=lambda a: int(a.id)) == attendees


@pytest.mark.asyncio
async def test_concurrent_creates_get_distinct_ids(channel, future_time):
    created = await asyncio.gather(*[
        channel.create(f"event {num}", future_time) for num in range(10)
    ])

    assert sorted(int(event.id) for event in created) == list(range(10))
    listing = (await channel.list()).split("\n")
    assert len(listing) == 10


@pytest.mark.asyncio
async def test_one_lock_per_partition(event_store):
    key = PartitionKey("Test Server", "general")

    first = await event_store.get_lock(key)
    second = await event_store.get_lock(PartitionKey("Test Server", "general"))
    other = await event_store.get_lock(PartitionKey("Test Server", "games"))

    assert first is second
    assert first is not other
