"""
Output tools module.

Everything that the bot sends through discord is managed by this module;
this includes the display string table lookup, plain messages, long
message splitting and error embeds.
"""

import os
import re
from typing import List, Optional

from discord import Colour, Embed, Forbidden, HTTPException, Message
from discord.abc import Messageable
from loguru import logger

from schedbot import settings
from schedbot.output import eng_strings
from schedbot.utils.text_utils import group_strings

PARENT_DIRECTORY = os.path.join(os.getcwd(), "")
DEFAULT_LANG = "eng"
TOKEN_REGEX = r"[MN][A-Za-z\d]{23}\.[\w-]{6}\.[\w-]{27}"

# Turned into a dict at runtime, so that we don't have to use getattr.
ENG_STRINGS = {
    name: value for name, value in vars(eng_strings).items()
    if not name.startswith("__")
}


def disp_str(str_name: str, lang: str = DEFAULT_LANG) -> str:
    """
    Retrieves display string based on string name.

    :param str_name: Name of string
    :param lang: Language of string
    :return: Pre-formatted string
    """
    if lang == "eng" and str_name in ENG_STRINGS:
        return (
            ENG_STRINGS[str_name]
            .replace("%PREFIX%", settings.command_prefix)
            .replace("%COMMAND%", settings.command_word)
        )

    return ""


async def send_message(
        channel: Messageable,
        text: Optional[str],
        embed: Optional[Embed] = None,
        token_guard: bool = False,
        path_guard: bool = False
) -> Optional[Message]:
    """
    Sends a message to a given context or channel.

    :param channel: Context or channel of message
    :param text: Text content of message
    :param embed: Embed of message
    :param token_guard: Censor discord bot tokens
    :param path_guard: Censor full project directory
    :return: Discord Message object, or None if sending failed
    """
    if token_guard:
        text = re.sub(TOKEN_REGEX, "[REDACTED TOKEN]", text)

    if path_guard:
        text = text.replace(PARENT_DIRECTORY, "./")

    try:
        message = await channel.send(text, embed=embed)
        return message
    except Forbidden:
        logger.warning(
            "Failed to send message to channel ID {}",
            str(channel)
        )
    except HTTPException:
        logger.error(
            "Failed to send message to channel {} "
            "due to invalid argument.",
            channel
        )

    return None


async def send_long_message(
        channel: Messageable,
        text: str
) -> List[Message]:
    """
    Sends text that may exceed the Discord message limit, split on line
    boundaries into as few messages as possible.

    :param channel: Context or channel of message
    :param text: Text content, possibly longer than the message limit
    :return: List of sent messages
    """
    messages = []
    for chunk in group_strings(
            text.split("\n"),
            max_length=settings.max_message_length
    ):
        message = await send_message(channel, chunk)
        if message is not None:
            messages.append(message)

    return messages


async def send_message_embed(
        channel: Messageable,
        title: str,
        desc: str,
        colour: Colour = Colour(settings.embed_color_normal)
) -> Optional[Message]:
    """
    Send a single embed with just a title, description and colour.

    Falls back to a plain message if the bot cannot post embeds.

    :param channel: Channel to send embed to
    :param title: Embed title
    :param desc: Embed description
    :param colour: Embed colour
    :return: Sent message
    """
    desc = desc.replace(PARENT_DIRECTORY, "./")
    embed = Embed(title=title, colour=colour, description=desc)

    try:
        # noinspection PyTypeChecker
        message = await channel.send(None, embed=embed)
        return message
    except Forbidden:
        logger.warning(
            "Failed to send embed to channel ID {}; "
            "falling back on plain message",
            str(channel)
        )

        return await send_message(channel, f"**{title}**\n\n{desc}")


async def send_error_embed(
        channel: Messageable,
        title: str,
        desc: str
) -> Optional[Message]:
    """
    Send an error embed.

    :param channel: Channel to send error to
    :param title: Embed title
    :param desc: Embed desc
    :return: Sent message
    """
    return await send_message_embed(
        channel,
        title,
        desc,
        Colour(settings.embed_color_error)
    )
