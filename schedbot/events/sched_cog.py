"""Sched Cog Module."""

from discord.ext import commands
from discord.ext.commands import Context
from loguru import logger

from schedbot import settings
from schedbot.events.calendar.event_store import EventStore
from schedbot.events.command_router import CommandRouter
from schedbot.output import send_long_message


class SchedCog(commands.Cog, name="sched"):
    """
    Channel Event Scheduler.

    Lets members schedule events in a channel, respond to them with yes,
    no or maybe, and list or cancel them. Every channel of every server
    keeps its own events.
    """

    __slots__ = ["bot", "router"]

    # Using forward references to avoid cyclic imports
    # noinspection PyUnresolvedReferences
    def __init__(
            self,
            bot: "SchedBot",
            event_store: EventStore
    ) -> None:
        """
        Initializer for the SchedCog class.

        :param bot: Scheduler bot object
        :param event_store: Event store shared by all channels
        """
        self.bot = bot
        self.router = CommandRouter(event_store)

    @commands.command(name=settings.command_word)
    @commands.guild_only()
    async def sched(self, context: Context, *args: str) -> None:
        """
        Main scheduler command, dispatching to its subcommands.

        :param context: Command context
        :param args: Subcommand word followed by its arguments
        """
        command = args[0] if args else ""
        reply = await self.router.handle(
            server_name=context.guild.name,
            channel_name=context.channel.name,
            caller_id=str(context.author.id),
            caller_name=context.author.display_name,
            command=command,
            args=list(args[1:])
        )

        logger.trace(
            "Replying to {} in #{}: {}",
            command,
            context.channel.name,
            reply
        )
        await send_long_message(context, reply)
