"""Escaping of text embedded in card markdown."""

from __future__ import annotations

import re

_INDENT_PATTERN = re.compile(r"\n +")
_SPECIAL_CHARACTERS = ("_", "*", "|", "#", "-", ">")


def escape_markdown_tokens(text: str) -> str:
    """Neutralise characters the card renderer would treat as markup.

    Runs of spaces after a newline collapse to a single space, then each of
    ``_ * | # - >`` is prefixed with a backslash.
    """

    escaped = _INDENT_PATTERN.sub("\n ", text)
    for character in _SPECIAL_CHARACTERS:
        escaped = escaped.replace(character, "\\" + character)
    return escaped
