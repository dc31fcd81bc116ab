"""
Event Module.

Contains the scheduled event class and the attendee records that track
who responded to it. An attendee is only ever in one of the accepted,
declined or maybe lists of an event.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from schedbot.output import disp_str
from schedbot.output.error_handler import SchedError
from schedbot.utils.time_utils import format_time, to_utc, utc_time_now

RESPONSES = ("accepted", "declined", "maybe")


class EventLoadError(Exception):
    """When event fails to load from dictionary."""


class ValidationError(SchedError):
    """When user input for an event is rejected."""


@dataclass(frozen=True)
class Attendee:
    """
    A participant who responded to an event.

    Parameters:
    - id: Platform user ID
    - name: Display name at the time of the response
    """
    id: str
    name: str

    def save_to_dict(self) -> dict:
        """
        Saves attendee to a dictionary.

        :return: Dictionary containing attendee ID and name
        """
        return {"id": self.id, "name": self.name}

    @staticmethod
    def load_from_dict(attendee_dict: dict) -> "Attendee":
        """
        Loads attendee from a dictionary.

        :param attendee_dict: Dictionary containing attendee ID and name
        :return: Attendee
        :raises KeyError: Missing attendee parameters
        """
        return Attendee(
            id=str(attendee_dict["id"]),
            name=str(attendee_dict["name"])
        )


class Event:
    """Scheduled event with its responses."""

    __slots__ = ["id", "name", "time", "accepted", "declined", "maybe"]

    def __init__(
            self,
            event_id: str,
            name: str,
            time: datetime,
            accepted: Optional[List[Attendee]] = None,
            declined: Optional[List[Attendee]] = None,
            maybe: Optional[List[Attendee]] = None
    ) -> None:
        """
        Initializer for the Event class.

        :param event_id: Event ID, unique within its channel
        :param name: Name of event
        :param time: Scheduled time of event
        :param accepted: Attendees that accepted
        :param declined: Attendees that declined
        :param maybe: Attendees that might attend
        """
        self.id = event_id
        self.name = name
        self.time = to_utc(time)
        self.accepted: List[Attendee] = list(accepted or [])
        self.declined: List[Attendee] = list(declined or [])
        self.maybe: List[Attendee] = list(maybe or [])

    @staticmethod
    def create(event_id: str, name: str, time: datetime) -> "Event":
        """
        Create a new event without any responses.

        :param event_id: Event ID
        :param name: Name of event
        :param time: Scheduled time of event
        :return: New event
        :raises ValidationError: Empty event name
        """
        if not name or not name.strip():
            raise ValidationError("sched_empty_name")

        return Event(event_id, name.strip(), time)

    def has_passed(self, time: Optional[datetime] = None) -> bool:
        """
        Check if the event's scheduled time has passed.

        :param time: Time to check against
        :return: Boolean representing if the event is in the past
        """
        if time is None:
            time = utc_time_now()

        return self.time < time

    def _remove_attendee(self, attendee_id: str) -> None:
        for response in RESPONSES:
            setattr(self, response, [
                attendee for attendee in getattr(self, response)
                if attendee.id != attendee_id
            ])

    def accept(self, attendee: Attendee) -> None:
        """
        Mark attendee as attending.

        :param attendee: Responding attendee
        """
        self._remove_attendee(attendee.id)
        self.accepted.append(attendee)

    def decline(self, attendee: Attendee) -> None:
        """
        Mark attendee as not attending.

        :param attendee: Responding attendee
        """
        self._remove_attendee(attendee.id)
        self.declined.append(attendee)

    def maybe_attend(self, attendee: Attendee) -> None:
        """
        Mark attendee as undecided.

        Named maybe_attend since the maybe attribute holds the list.

        :param attendee: Responding attendee
        """
        self._remove_attendee(attendee.id)
        self.maybe.append(attendee)

    def render_summary(self) -> str:
        """
        One-line summary used in event listings.

        :return: Summary string
        """
        return disp_str("sched_summary").format(
            self.id,
            self.name,
            format_time(self.time)
        )

    def render_responses(self) -> str:
        """
        Yes, no and maybe lines listing attendee names.

        :return: Responses string
        """
        return disp_str("sched_responses").format(
            ", ".join(attendee.name for attendee in self.accepted),
            ", ".join(attendee.name for attendee in self.declined),
            ", ".join(attendee.name for attendee in self.maybe)
        )

    def save_to_dict(self) -> dict:
        """
        Saves event object into a dictionary so that it may be loaded
        again.

        :return: Dictionary of event parameters
        """
        save_dict = {
            "id": self.id,
            "name": self.name,
            "time": self.time.isoformat()
        }
        for response in RESPONSES:
            save_dict[response] = [
                attendee.save_to_dict() for attendee in getattr(self, response)
            ]

        return save_dict

    @staticmethod
    def load_from_dict(event_dict: dict) -> "Event":
        """
        Loads event object from a dictionary.

        :param event_dict: Dictionary containing event parameters
        :return: Event object
        :raises EventLoadError: Invalid event parameters
        """
        try:
            time = event_dict["time"]
            if not isinstance(time, datetime):
                time = datetime.fromisoformat(str(time))

            responses = {
                response: [
                    Attendee.load_from_dict(attendee_dict)
                    for attendee_dict in event_dict.get(response) or []
                ]
                for response in RESPONSES
            }

            return Event(
                event_id=str(event_dict["id"]),
                name=str(event_dict["name"]),
                time=time,
                **responses
            )

        except (KeyError, TypeError, ValueError) as e:
            raise EventLoadError from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Event):
            return NotImplemented

        return self.save_to_dict() == other.save_to_dict()

    def __repr__(self) -> str:
        return f"Event({self.id!r}, {self.name!r}, {self.time.isoformat()})"
