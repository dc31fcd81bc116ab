"""
Error handler module.

Command errors are all handled here. Scheduler errors derive from
SchedError, which carries its own display strings; discord command
errors are mapped to display strings by class name.
"""

from discord import Forbidden
from discord.ext.commands import CommandError, CommandNotFound, Context
from loguru import logger

from schedbot.output import disp_str, send_error_embed

COMMAND_ERRORS = {
    "UserInputError": "command_error_user_input_error",
    "BadArgument": "command_error_bad_argument",
    "MissingRequiredArgument": "command_error_missing_required_argument",
    "UnexpectedQuoteError": "command_error_unexpected_quote_error",
    "InvalidEndOfQuotedStringError": (
        "command_error_invalid_end_of_quoted_string_error"
    ),
    "ExpectedClosingQuoteError": "command_error_expected_closing_quote_error",
    "NoPrivateMessage": "command_error_no_private_message",
    "CommandInvokeError": "command_error_invoke_error"
}


class SchedError(CommandError):
    """
    Scheduler error.

    Directs error outputs to disp_str; the display type names a pair of
    strings ending in `_title` and `_desc`, and any arguments are
    formatted into the description.
    """

    __slots__ = ["disp_type", "error_header", "error_message"]

    def __init__(self, disp_type: str, *args):
        """
        Initializer for the SchedError class.

        :param disp_type: Display type taken from disp_str
        """
        self.disp_type = disp_type
        self.error_header = disp_str(f"{disp_type}_title")
        self.error_message = disp_str(f"{disp_type}_desc")

        if args:
            self.error_message = self.error_message.format(*args)

        super().__init__(self.error_message)


async def handle_command_error(
        context: Context,
        exception: Exception
) -> None:
    """
    Handles retrieval and sending of command error messages.

    :param context: Context in which error-causing message was sent
    :param exception: Exception raised by command
    """
    if isinstance(exception, CommandNotFound):
        logger.trace("Command not found: {}", context.command)
        return

    error_header = disp_str("command_error_header")

    if isinstance(exception, SchedError):
        error_header = exception.error_header
        error_message = exception.error_message
    elif type(exception).__name__ in COMMAND_ERRORS:
        error_message = (
            disp_str(COMMAND_ERRORS[type(exception).__name__])
            + "\n" + str(exception)
        )
    else:
        logger.error(
            "Ignored command error {} "
            "triggered by command {} in channel {}",
            type(exception).__name__,
            context.command,
            context.channel
        )
        return

    if error_message:
        # Trace, because we don't need the bot to report to us whenever
        # a user enters a command wrongly.
        logger.trace(
            disp_str("command_error_logger_header"),
            error_message,
            context.command
        )

        try:
            await send_error_embed(
                channel=context,
                title=error_header,
                desc=error_message
            )
        except Forbidden:
            logger.warning(
                disp_str("command_error_failed_to_send"),
                context.channel.id,
                error_message
            )
