"""
Command Router Module.

Turns an already split scheduler command into one event store operation
and renders the result as text. The router does not know about Discord;
the cog hands it plain server, channel and caller details.
"""

from typing import Awaitable, Callable, Dict, List, Optional

from loguru import logger

from schedbot.events.calendar.event import Attendee, ValidationError
from schedbot.events.calendar.event_store import (
    ChannelEventStore, EventNotFoundError, EventStore
)
from schedbot.output import disp_str
from schedbot.utils.time_utils import format_time, parse_time_phrase

Handler = Callable[[ChannelEventStore, Attendee, List[str]], Awaitable[str]]

RESPONSE_REPLIES = {
    "accept": "sched_accept_success",
    "decline": "sched_decline_success",
    "maybe": "sched_maybe_success"
}


def require_id(command: str, args: List[str]) -> str:
    """
    Get the event ID argument of a command.

    :param command: Command word, used for the usage message
    :param args: Command arguments
    :return: Event ID
    :raises ValidationError: No event ID given
    """
    if not args:
        raise ValidationError(
            "sched_missing_args",
            disp_str("sched_usage_id").format(command)
        )

    return args[0]


class CommandRouter:
    """Dispatches scheduler commands to the event store."""

    __slots__ = ["event_store", "handlers"]

    def __init__(self, event_store: EventStore) -> None:
        """
        Initializer for the CommandRouter class.

        :param event_store: Event store shared by all channels
        """
        self.event_store = event_store
        self.handlers: Dict[str, Handler] = {
            "create": self.handle_create,
            "delete": self.handle_delete,
            "list": self.handle_list,
            "accept": self.response_handler("accept"),
            "yes": self.response_handler("accept", "yes"),
            "decline": self.response_handler("decline"),
            "no": self.response_handler("decline", "no"),
            "maybe": self.response_handler("maybe"),
            "responses": self.handle_responses,
            "help": self.handle_help
        }

    async def handle(
            self,
            server_name: str,
            channel_name: str,
            caller_id: str,
            caller_name: str,
            command: str,
            args: List[str]
    ) -> str:
        """
        Run a scheduler command.

        :param server_name: Name of server the command was sent in
        :param channel_name: Name of channel the command was sent in
        :param caller_id: User ID of caller
        :param caller_name: Display name of caller
        :param command: Command word
        :param args: Command arguments
        :return: Text to reply with
        :raises PersistenceFailure: The command's change was not saved
        """
        logger.trace(
            "Sched command {} {} from {} in {}/{}",
            command,
            args,
            caller_id,
            server_name,
            channel_name
        )

        handler = self.handlers.get(command.lower())
        if handler is None:
            return disp_str("sched_unknown_command")

        events = self.event_store.partition(server_name, channel_name)
        caller = Attendee(id=str(caller_id), name=caller_name)

        try:
            return await handler(events, caller, args)
        except (ValidationError, EventNotFoundError) as e:
            return e.error_message

    @staticmethod
    async def handle_create(
            events: ChannelEventStore,
            _: Attendee,
            args: List[str]
    ) -> str:
        """
        Create an event from a name and a time phrase.

        :param events: Channel events
        :param _: Caller
        :param args: Event name followed by the time phrase
        :return: Reply text
        :raises ValidationError: Bad name or time
        """
        if len(args) < 2:
            raise ValidationError(
                "sched_missing_args",
                disp_str("sched_usage_create")
            )

        name = args[0]
        phrase = " ".join(args[1:])
        time = parse_time_phrase(phrase)
        if time is None:
            raise ValidationError("sched_bad_time", phrase)

        event = await events.create(name, time)
        return disp_str("sched_create_success").format(
            event.name,
            format_time(event.time),
            event.id
        )

    @staticmethod
    async def handle_delete(
            events: ChannelEventStore,
            _: Attendee,
            args: List[str]
    ) -> str:
        """
        Delete an event.

        :param events: Channel events
        :param _: Caller
        :param args: Event ID
        :return: Reply text
        :raises EventNotFoundError: No such event
        """
        event = await events.remove(require_id("delete", args))
        return disp_str("sched_delete_success").format(event.id, event.name)

    @staticmethod
    async def handle_list(
            events: ChannelEventStore,
            *_
    ) -> str:
        """
        List upcoming events.

        :param events: Channel events
        :return: Reply text
        """
        return await events.list()

    @staticmethod
    def response_handler(
            response: str,
            command: Optional[str] = None
    ) -> Handler:
        """
        Generate the handler for a yes, no or maybe response.

        :param response: One of accept, decline or maybe
        :param command: Command word used for the response, if not the
            response itself
        :return: Async handler recording the caller's response
        """

        async def func(
                events: ChannelEventStore,
                caller: Attendee,
                args: List[str]
        ) -> str:
            """
            Inner function.

            :param events: Channel events
            :param caller: Responding caller
            :param args: Event ID
            :return: Reply text
            :raises EventNotFoundError: No such event
            """
            event = await events.respond(
                require_id(command or response, args),
                caller,
                response
            )
            return disp_str(RESPONSE_REPLIES[response]).format(
                caller.name,
                event.name
            )

        return func

    @staticmethod
    async def handle_responses(
            events: ChannelEventStore,
            _: Attendee,
            args: List[str]
    ) -> str:
        """
        Show who responded to an event.

        :param events: Channel events
        :param _: Caller
        :param args: Event ID
        :return: Reply text
        :raises EventNotFoundError: No such event
        """
        event_id = require_id("responses", args)
        event = await events.retrieve(event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        return event.render_responses()

    @staticmethod
    async def handle_help(*_) -> str:
        """Usage text."""
        return disp_str("sched_help")
