"""
Event Store Module.

The event store hands out partition-scoped handles (one per server and
channel) and serializes every operation on a partition with a lock from
its lock table. Each operation loads the partition, works on it, and
saves it again if anything changed, all while holding the lock; file
access runs in the default executor so that other partitions are not
held up meanwhile.

Expired events are swept out of a partition, and the swept partition is
saved, whenever a partition is listed or modified.
"""

import asyncio
import itertools
from asyncio import Lock
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from loguru import logger

from schedbot.database import PartitionDatabase, PartitionKey
from schedbot.events.calendar.event import Attendee, Event, ValidationError
from schedbot.output import disp_str
from schedbot.output.error_handler import SchedError
from schedbot.utils.time_utils import utc_time_now

RESPONSE_CALLS = {
    "accept": Event.accept,
    "decline": Event.decline,
    "maybe": Event.maybe_attend
}


class EventNotFoundError(SchedError):
    """When there is no event with the requested ID in a partition."""

    def __init__(self, event_id: str) -> None:
        """
        Initializer for the EventNotFoundError class.

        :param event_id: Requested event ID
        """
        super().__init__("sched_not_found", event_id)
        self.event_id = event_id


def sweep(
        events: Dict[str, Event],
        time: Optional[datetime] = None
) -> bool:
    """
    Remove events whose scheduled time has passed.

    :param events: Events indexed by event ID, modified in place
    :param time: Time to check against
    :return: Whether any events were removed
    """
    if time is None:
        time = utc_time_now()

    expired = [
        event_id for event_id, event in events.items()
        if event.has_passed(time)
    ]
    for event_id in expired:
        del events[event_id]

    if expired:
        logger.trace("Swept expired events: {}", ", ".join(expired))

    return bool(expired)


def smallest_free_id(events: Dict[str, Any]) -> str:
    """
    Get the smallest non-negative integer not used as an event ID.

    :param events: Events indexed by event ID
    :return: Free event ID as a decimal string
    """
    for candidate in itertools.count():
        if str(candidate) not in events:
            return str(candidate)


class EventStore:
    """
    Durable event store for all channels.

    Parameters:
    - database: Partition file storage
    - locks: Lock table indexed by partition
    - locks_lock: Guards the lock table itself
    """

    __slots__ = ["database", "locks", "locks_lock"]

    def __init__(self, data_dir: str) -> None:
        """
        Initializer for the EventStore class.

        :param data_dir: Directory to store partitions in
        """
        self.database = PartitionDatabase(data_dir)
        self.locks: Dict[PartitionKey, Lock] = {}
        self.locks_lock = Lock()

    def partition(self, server: str, channel: str) -> "ChannelEventStore":
        """
        Get a handle to the events of one channel.

        :param server: Server name
        :param channel: Channel name
        :return: Partition-scoped event store
        """
        return ChannelEventStore(self, PartitionKey(server, channel))

    async def get_lock(self, key: PartitionKey) -> Lock:
        """
        Get the lock of a partition, creating it on first use.

        :param key: Partition key
        :return: Partition lock
        """
        async with self.locks_lock:
            return self.locks.setdefault(key, Lock())

    async def run_locked(
            self,
            key: PartitionKey,
            call: Callable[[Dict[str, Event]], Tuple[Any, bool]]
    ) -> Any:
        """
        Run a read-modify-write call on a partition.

        The partition is loaded and passed to the call, which returns
        its result along with whether the partition has to be saved.
        Nothing else can touch the partition until the call is done and
        the partition is saved.

        :param key: Partition key
        :param call: Synchronous call taking the partition's events
        :return: Result of the call
        :raises PersistenceFailure: Partition could not be saved
        """
        loop = asyncio.get_running_loop()
        lock = await self.get_lock(key)
        async with lock:
            events = await loop.run_in_executor(
                None,
                self.database.load,
                key
            )

            result, modified = call(events)
            if modified:
                await loop.run_in_executor(
                    None,
                    self.database.save,
                    key,
                    events
                )

            return result


class ChannelEventStore:
    """
    Event store operations scoped to a single channel.

    Every method is one locked read-modify-write unit on the channel's
    partition; no lock is held between calls.
    """

    __slots__ = ["event_store", "key"]

    def __init__(self, event_store: EventStore, key: PartitionKey) -> None:
        """
        Initializer for the ChannelEventStore class.

        :param event_store: Parent event store
        :param key: Partition key
        """
        self.event_store = event_store
        self.key = key

    async def store(self, event_id: str, event: Event) -> None:
        """
        Insert or replace an event.

        :param event_id: Event ID
        :param event: Event to store, which must carry the same ID
        :raises ValueError: Event ID does not match
        """
        if event.id != event_id:
            raise ValueError(
                f"Cannot store event {event.id} under ID {event_id}"
            )

        def call(events: Dict[str, Event]) -> Tuple[None, bool]:
            sweep(events)
            events[event_id] = event
            return None, True

        await self.event_store.run_locked(self.key, call)

    async def retrieve(self, event_id: str) -> Optional[Event]:
        """
        Retrieve an event.

        Expired events are treated as missing, but the partition is not
        rewritten.

        :param event_id: Event ID
        :return: Event, or None if there is no such upcoming event
        """
        def call(events: Dict[str, Event]) -> Tuple[Optional[Event], bool]:
            event = events.get(event_id)
            if event is None or event.has_passed():
                return None, False

            return event, False

        return await self.event_store.run_locked(self.key, call)

    async def delete(self, event_id: str) -> None:
        """
        Delete an event if it exists.

        :param event_id: Event ID
        """
        def call(events: Dict[str, Event]) -> Tuple[None, bool]:
            swept = sweep(events)
            removed = events.pop(event_id, None)
            return None, swept or removed is not None

        await self.event_store.run_locked(self.key, call)

    async def list(self) -> str:
        """
        List upcoming events, sweeping expired events out of the saved
        partition.

        :return: Newline separated event summaries ordered by time, or
            the no events message
        """
        def call(events: Dict[str, Event]) -> Tuple[str, bool]:
            swept = sweep(events)
            if not events:
                return disp_str("sched_no_events"), swept

            ordered = sorted(events.values(), key=lambda event: event.time)
            return "\n".join(
                event.render_summary() for event in ordered
            ), swept

        return await self.event_store.run_locked(self.key, call)

    async def generate_id(self) -> str:
        """
        Get the smallest free event ID in this channel.

        The ID is not reserved; use create to allocate and store in one
        step.

        :return: Free event ID
        """
        def call(events: Dict[str, Event]) -> Tuple[str, bool]:
            return smallest_free_id(events), False

        return await self.event_store.run_locked(self.key, call)

    async def create(self, name: str, time: datetime) -> Event:
        """
        Create and store a new event under the smallest free ID.

        :param name: Event name
        :param time: Scheduled time
        :return: Created event
        :raises ValidationError: Empty event name or time in the past
        """
        def call(events: Dict[str, Event]) -> Tuple[Event, bool]:
            now = utc_time_now()
            if time < now:
                raise ValidationError("sched_past_time")

            sweep(events, now)
            event = Event.create(smallest_free_id(events), name, time)
            events[event.id] = event
            return event, True

        event = await self.event_store.run_locked(self.key, call)
        logger.debug(
            "Created event {} ({}) in {}/{}",
            event.id,
            event.name,
            *self.key
        )
        return event

    async def respond(
            self,
            event_id: str,
            attendee: Attendee,
            response: str
    ) -> Event:
        """
        Record an attendee's response to an event.

        :param event_id: Event ID
        :param attendee: Responding attendee
        :param response: One of accept, decline or maybe
        :return: Updated event
        :raises EventNotFoundError: No such upcoming event
        :raises KeyError: Unknown response
        """
        response_call = RESPONSE_CALLS[response]

        def call(events: Dict[str, Event]) -> Tuple[Event, bool]:
            sweep(events)
            if event_id not in events:
                raise EventNotFoundError(event_id)

            event = events[event_id]
            response_call(event, attendee)
            return event, True

        return await self.event_store.run_locked(self.key, call)

    async def remove(self, event_id: str) -> Event:
        """
        Delete an existing event.

        :param event_id: Event ID
        :return: Deleted event
        :raises EventNotFoundError: No such upcoming event
        """
        def call(events: Dict[str, Event]) -> Tuple[Event, bool]:
            sweep(events)
            if event_id not in events:
                raise EventNotFoundError(event_id)

            return events.pop(event_id), True

        return await self.event_store.run_locked(self.key, call)
