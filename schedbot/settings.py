# pylint: skip-file
"""
This is the settings file.

Every value here can be overridden by a YAML file, either the one named
by the SCHEDBOT_CONFIG environment variable or ./config.yml if it
exists. Keys in the YAML file are the same as the variable names here.

========================================================================
Log levels:

5  | Trace    | All debug messages, including every store operation,
              | used to test program logic and to pinpoint the exact
              | locations where things go wrong.

10 | Debug    | Important debug messages such as partition writes.

20 | Info     | All information that might be necessary for the user
              | to monitor what the bot is doing.

30 | Warning  | Things that go wrong but are recovered from, such as
              | unreadable event partitions.

40 | Error    | Errors that impact the execution of a specific command,
              | such as failing to save an event partition.

50 | Critical | Unexpected errors that impact the entire bot.

60 | Nothing  | No messages at all.


For example, setting the log level to 40 would mean receiving both error
and critical logs. The master log is a Discord channel dedicated for bot
logs (without accessing the console).
"""

import os

import yaml
from loguru import logger

# Command prefix
command_prefix = "!"

# Command word used after the prefix
command_word = "sched"

# Bot Description
bot_description = "Schedbot: Channel event scheduler"

# Discord bot token
bot_token = ""

# Discord application client ID (Used for the invite URL, 0 to skip)
client_id = 0

# Bot owner user IDs (Set of ints)
bot_owners = set()

# Master log channel ID (Leave as 0 for no logs)
master_log_channel = 0

# Log level
master_log_level = 30
console_log_level = 20

# Embed colours
embed_color_normal = 0xa0e0f0
embed_color_error = 0xff2b4b

# Event partitions are stored under this directory
data_dir = "./.data"

# Timezone used for time phrases that don't name one
default_timezone = "UTC"

# Discord message character limit
max_message_length = 2000


CONFIG_ENV_VAR = "SCHEDBOT_CONFIG"
DEFAULT_CONFIG_PATH = "./config.yml"


def load_overrides(path: str) -> None:
    """
    Override settings with values from a YAML file.

    :param path: Path to YAML file
    """
    with open(path, "r", encoding="utf-8") as file:
        overrides = yaml.safe_load(file) or {}

    if not isinstance(overrides, dict):
        logger.warning(
            "Ignoring settings file {}: expected a mapping, found {}",
            path,
            type(overrides).__name__
        )
        return

    settings_vars = globals()
    for key, value in overrides.items():
        if (not isinstance(key, str)
                or key.startswith("_")
                or key not in settings_vars):
            logger.warning("Ignoring unknown setting {} in {}", key, path)
            continue

        settings_vars[key] = value


_config_path = os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
if os.path.isfile(_config_path):
    load_overrides(_config_path)
