from __future__ import annotations

import re

from beartype import beartype

# Characters that are always removed from annotation values used in file names.
# '-' must stay last in the class to be literal.
UNSAFE_FILENAME_CHARS = re.compile(r"[\"'#*<>{}()\[\].,:;!/?=\\-]")


@beartype
def sanitize(
    value: str,
    ascii_substitute: str | None = None,
    whitespace_substitute: str | None = None,
    strip_pattern: re.Pattern[str] | None = None,
    max_len: int | None = None,
) -> str:
    """Truncate, strip and substitute characters in a string.

    Steps are applied in a fixed order: truncation to `max_len` characters,
    removal of everything matched by `strip_pattern`, then (only if a
    substitute is given) trimming of surrounding whitespace and substitution.
    The result may be shorter than `max_len` once whitespace is trimmed.
    With no options set, `value` is returned untouched.

    Args:
        value: String to process
        ascii_substitute: Replacement for any non-ASCII character
        whitespace_substitute: Replacement for any whitespace character
        strip_pattern: Compiled pattern, all matches are removed
        max_len: Max number of characters kept from the start of `value`

    Returns:
        Processed string
    """
    string = value[:max_len] if max_len is not None else value

    if strip_pattern is not None:
        string = strip_pattern.sub("", string)

    if ascii_substitute is None and whitespace_substitute is None:
        return string

    string = string.strip()
    if whitespace_substitute is not None:
        string = "".join(whitespace_substitute if c.isspace() else c for c in string)
    if ascii_substitute is not None:
        string = "".join(c if c.isascii() else ascii_substitute for c in string)

    return string


@beartype
def truncate(value: str, max_len: int) -> str:
    """Shorthand for display truncation."""
    return sanitize(value, max_len=max_len)
