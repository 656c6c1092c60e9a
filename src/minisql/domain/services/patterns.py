"""LIKE pattern matching.

Wildcards:
    - ``%`` matches any run of characters, including none
    - ``_`` matches exactly one character

The escape character (backslash by default) makes the wildcard right after
it literal: ``\\%`` matches a percent sign. Before any other character, or
at the end of the pattern, the escape character is itself literal.

Matching is case-insensitive, as with MySQL's default collation.
"""

from __future__ import annotations

import re
from functools import lru_cache

DEFAULT_ESCAPE = "\\"
_WILDCARDS = {"%": ".*", "_": "."}


@lru_cache(maxsize=256)
def compile_like(pattern: str, escape: str = DEFAULT_ESCAPE) -> re.Pattern[str]:
    """Translate a LIKE pattern into a compiled regular expression."""
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        following = pattern[i + 1] if i + 1 < len(pattern) else None
        if char == escape and following in _WILDCARDS:
            parts.append(re.escape(following))
            i += 2
            continue
        parts.append(_WILDCARDS.get(char) or re.escape(char))
        i += 1
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def like(text: str, pattern: str, escape: str = DEFAULT_ESCAPE) -> bool:
    """True when ``text`` matches the whole LIKE ``pattern``."""
    return compile_like(pattern, escape).fullmatch(text) is not None
