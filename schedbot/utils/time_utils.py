"""Time utils module."""

from datetime import datetime
from typing import Optional

import dateparser
import pytz

from schedbot import settings

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def utc_time_now() -> datetime:
    """
    Get current UTC timezone aware time.

    :return: Timezone aware datetime
    """
    return datetime.now(pytz.utc)


def to_utc(time: datetime) -> datetime:
    """
    Normalize a datetime to UTC; naive datetimes are taken to be UTC.

    :param time: Datetime to normalize
    :return: Timezone aware UTC datetime
    """
    if time.tzinfo is None:
        return pytz.utc.localize(time)

    return time.astimezone(pytz.utc)


def parse_time_phrase(
        phrase: str,
        now: Optional[datetime] = None
) -> Optional[datetime]:
    """
    Parse a free-text time phrase such as "tomorrow 8pm" or
    "2026-12-01 18:00" into an absolute UTC time.

    Phrases without a timezone are read in the configured default
    timezone. Ambiguous phrases (like a bare weekday) prefer the future.

    :param phrase: Human time phrase
    :param now: Reference time for relative phrases
    :return: Timezone aware UTC datetime, or None if the phrase could
        not be understood
    """
    if not phrase or not phrase.strip():
        return None

    parser_settings = {
        "TIMEZONE": settings.default_timezone,
        "TO_TIMEZONE": "UTC",
        "RETURN_AS_TIMEZONE_AWARE": True,
        "PREFER_DATES_FROM": "future"
    }
    if now is not None:
        local_zone = pytz.timezone(settings.default_timezone)
        parser_settings["RELATIVE_BASE"] = (
            to_utc(now).astimezone(local_zone).replace(tzinfo=None)
        )

    parsed = dateparser.parse(phrase.strip(), settings=parser_settings)
    if parsed is None:
        return None

    return to_utc(parsed)


def format_time(time: datetime) -> str:
    """
    Format a time for display, always in UTC so that output does not
    depend on the host's locale or timezone.

    :param time: Time to format
    :return: Formatted time string, e.g. 2026-10-18 18:00:00 +0000
    """
    return to_utc(time).strftime(DISPLAY_FORMAT)
