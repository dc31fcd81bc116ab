"""
Main bot module.

Entry point for running the bot.
"""
import sys
import traceback
from typing import Optional

import discord
from discord import ext as dext, TextChannel
from discord.ext.commands import Context
from loguru import logger

from schedbot import settings
from schedbot.events.calendar.event_store import EventStore
from schedbot.events.sched_cog import SchedCog
from schedbot.output import send_message
from schedbot.output.error_handler import handle_command_error

# Removing and replacing the default logger output
logger.remove(0)
logger.level("DEBUG", color="<fg 251>")
logger.add(
    sys.stderr,
    format="<bg 239><fg 15> {time:YYYY-MM-DD HH:mm:ss.SSS} </fg 15></bg 239>"
           "<bg 32><lvl><b> {level} </b></lvl></bg 32>"
           "<n> {message}</n>",
    level=settings.console_log_level
)


class SchedBot(dext.commands.Bot):
    """Event scheduler Discord bot."""

    __slots__ = [
        "master_log_id",
        "log_channel",
        "first_start"
    ]

    def __init__(self) -> None:
        """Initializer for the SchedBot class."""
        intents = discord.Intents.default()
        intents.message_content = True

        super().__init__(
            command_prefix=settings.command_prefix,
            help_command=None,
            description=settings.bot_description,
            owner_ids=set(settings.bot_owners),
            intents=intents
        )

        self.log_channel: Optional[TextChannel] = None
        self.master_log_id: Optional[int] = None
        self.first_start = True

    async def on_error(self, event_method: str, *args, **kwargs) -> None:
        """
        Called when an event raises an uncaught exception.

        :param event_method: The name of the event that raised the
            exception
        :param args: Positional arguments for the event that raised the
            exception
        :param kwargs: Keyword arguments for the event that raised the
            exception
        """
        logger.error(
            "Exception raised in {}.\n\t{}",
            event_method,
            traceback.format_exc().replace("\n", "\n\t")
        )

    async def on_command_error(
            self,
            context: Context,
            exception: Exception
    ) -> None:
        """
        Called when a command triggers an error.

        :param context: Context of error-triggering command
        :param exception: Exception that the command raised
        """
        await handle_command_error(context, exception)

    async def on_ready(self) -> None:
        """
        Called when the bot is done preparing the data received from
        Discord.
        """
        if self.first_start:
            await self.on_first_ready()

    async def on_first_ready(self) -> None:
        """Startup procedure."""
        if settings.master_log_channel:
            self.setup_master_log()

        logger.info(
            "Schedbot has started on {} ({}) with {} server(s).",
            self.user.name,
            self.user.id,
            len(self.guilds)
        )

        if settings.client_id:
            logger.info(
                "This bot's invite URL is {}",
                discord.utils.oauth_url(settings.client_id)
            )

        self.first_start = False

    def setup_master_log(self) -> None:
        """Forward log messages to the master log channel."""
        logger.trace("Setting up master log channel.")
        log_channel = self.get_channel(settings.master_log_channel)
        if log_channel is None or not isinstance(log_channel, TextChannel):
            logger.error(
                "Bot master logging channel ID {} not found; setting ignored.",
                settings.master_log_channel
            )
            return

        self.log_channel = log_channel
        logger.info(
            "Set up master log channel on #{} ({})",
            log_channel.name,
            log_channel.id
        )

        async def log_message(msg: str) -> None:
            await send_message(
                self.log_channel,
                msg,
                token_guard=True,
                path_guard=True
            )

        self.master_log_id = logger.add(
            log_message,
            colorize=False,
            backtrace=False,
            catch=False,
            format="**[{time:YYYY-MM-DD HH:mm:ss.SSS!UTC}][{level}]** "
                   "```\n{message}\n```",
            level=settings.master_log_level
        )


def main() -> None:
    """Run the bot until it is stopped."""
    bot = SchedBot()

    logger.info("Loading sched cog with data in {}.", settings.data_dir)
    bot.add_cog(SchedCog(bot, EventStore(settings.data_dir)))

    bot.run(settings.bot_token)


if __name__ == "__main__":
    main()
