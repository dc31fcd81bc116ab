"""
Database module.

Each (server, channel) partition of the event calendar is kept in its
own YAML file, holding the server and channel names and the full list
of that channel's events. File names are derived from digests of the
names, so any name is safe to use on disk.

Files are always rewritten as a whole: the new content goes to a
temporary file in the same directory which then replaces the old record,
so a crash mid write never leaves a truncated partition behind.

Reading is forgiving. A partition that cannot be read or parsed is
treated as empty so that the channel stays usable, at the cost of
losing whatever was in the damaged file. Writing is not: a failed write
is raised to the caller.
"""

import hashlib
import os
import re
import tempfile
from typing import Dict, NamedTuple

import yaml
from loguru import logger

from schedbot.events.calendar.event import Event, EventLoadError
from schedbot.output.error_handler import SchedError

FILE_EXTENSION = ".yml"
READABLE_PREFIX_LENGTH = 32
UNSAFE_CHARACTERS = re.compile(r"[^A-Za-z0-9_-]+")


def path_component(name: str) -> str:
    """
    Turn a server or channel name into a file name component.

    The component is a short readable prefix of the name followed by
    the SHA-256 digest of the full name, so it is unique per name, never
    a dot name and always well under filesystem name limits.

    :param name: Server or channel name
    :return: Path component
    """
    digest = hashlib.sha256(name.encode("utf-8")).hexdigest()
    readable = UNSAFE_CHARACTERS.sub("_", name)[:READABLE_PREFIX_LENGTH]
    return f"{readable}-{digest}"


class PartitionKey(NamedTuple):
    """Server and channel names identifying one event partition."""
    server: str
    channel: str


class PersistenceCorruption(Exception):
    """When a partition file exists but cannot be loaded."""


class PersistenceFailure(SchedError):
    """When a partition file cannot be written."""

    def __init__(self, key: PartitionKey) -> None:
        """
        Initializer for the PersistenceFailure class.

        :param key: Partition that failed to save
        """
        super().__init__("sched_save_failed")
        self.key = key


class PartitionDatabase:
    """Durable storage of event partitions under a data directory."""

    __slots__ = ["data_dir"]

    def __init__(self, data_dir: str) -> None:
        """
        Initializer for the PartitionDatabase class.

        :param data_dir: Directory holding one subdirectory per server
        """
        self.data_dir = data_dir

    def partition_path(self, key: PartitionKey) -> str:
        """
        Path to the file of a partition.

        Each name maps to one path component directly below its parent,
        see path_component. The readable names are kept inside the file.

        :param key: Partition key
        :return: Path to partition file
        """
        return os.path.join(
            self.data_dir,
            path_component(key.server),
            path_component(key.channel) + FILE_EXTENSION
        )

    def read(self, key: PartitionKey) -> Dict[str, Event]:
        """
        Read a partition file.

        :param key: Partition key
        :return: Events indexed by event ID, in stored order
        :raises FileNotFoundError: Partition has never been saved
        :raises PersistenceCorruption: Partition file is unreadable
        """
        path = self.partition_path(key)
        try:
            with open(path, "r", encoding="utf-8") as file:
                partition_dict = yaml.safe_load(file)
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise PersistenceCorruption(path) from e

        if partition_dict is None:
            return {}

        try:
            events: Dict[str, Event] = {}
            for event_dict in partition_dict["events"] or []:
                event = Event.load_from_dict(event_dict)
                events[event.id] = event

            return events

        except (EventLoadError, KeyError, TypeError) as e:
            raise PersistenceCorruption(path) from e

    def load(self, key: PartitionKey) -> Dict[str, Event]:
        """
        Load a partition, falling back on an empty partition if it is
        missing or damaged.

        :param key: Partition key
        :return: Events indexed by event ID, in stored order
        """
        try:
            events = self.read(key)
        except FileNotFoundError:
            logger.trace("No saved events for {}/{}", *key)
            return {}
        except PersistenceCorruption as e:
            logger.warning(
                "Discarding unreadable event partition {}: {}",
                e,
                repr(e.__cause__)
            )
            return {}

        logger.trace("Loaded {} events for {}/{}", len(events), *key)
        return events

    def save(self, key: PartitionKey, events: Dict[str, Event]) -> None:
        """
        Atomically replace a partition file.

        :param key: Partition key
        :param events: Events indexed by event ID
        :raises PersistenceFailure: Partition could not be written
        """
        path = self.partition_path(key)
        save_dict = {
            "server": key.server,
            "channel": key.channel,
            "events": [event.save_to_dict() for event in events.values()]
        }

        temp_path = None
        try:
            directory = os.path.dirname(path)
            os.makedirs(directory, exist_ok=True)

            with tempfile.NamedTemporaryFile(
                    mode="w",
                    encoding="utf-8",
                    dir=directory,
                    prefix=".",
                    suffix=".tmp",
                    delete=False
            ) as file:
                temp_path = file.name
                yaml.dump(
                    save_dict,
                    file,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False
                )
                file.flush()
                os.fsync(file.fileno())

            os.replace(temp_path, path)

        except (OSError, yaml.YAMLError) as e:
            logger.error(
                "Failed to save event partition {}: {}",
                path,
                repr(e)
            )

            if temp_path is not None and os.path.exists(temp_path):
                os.remove(temp_path)

            raise PersistenceFailure(key) from e

        logger.debug("Saved {} events to {}", len(events), path)
