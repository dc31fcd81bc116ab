"""Text util functions module."""

from typing import List


def string_wrap(text: str, wrap_length: int) -> List[str]:
    """
    Split a string into groups of wrap length.

    :param text: Original text
    :param wrap_length: Length at which the string has to be wrapped
    :return: List of wrapped strings
    """
    string_list = []
    while text:
        string_list.append(text[:wrap_length])
        text = text[wrap_length:]

    return string_list


def group_strings(
        strings: List[str],
        joiner: str = "\n",
        max_length: int = 2000
) -> List[str]:
    """
    Join a list of strings into groups no longer than the max length.

    Long event lists would otherwise exceed Discord's message limit, so
    lines are packed greedily into as few messages as possible. A single
    line longer than the limit is wrapped over several groups.

    :param strings: List of strings to group
    :param joiner: Joiner to join strings
    :param max_length: Maximum joined string length
    :return: List of joined strings
    """
    groups: List[str] = []
    buffer = None
    for string in strings:
        for piece in string_wrap(string, max_length) or [""]:
            if buffer is None:
                buffer = piece
            elif len(buffer) + len(joiner) + len(piece) <= max_length:
                buffer += joiner + piece
            else:
                groups.append(buffer)
                buffer = piece

    if buffer is not None:
        groups.append(buffer)

    return groups
