"""
Regex utilities used by the matcher and the renderer.

- match(): pull a captured value out of an utterance
- clear(): strip `[name]` placeholders that were never substituted
"""

import re
from functools import lru_cache

PLACEHOLDER = re.compile(r"\[[A-Za-z_][A-Za-z0-9_]*\]")


class MalformedPattern(ValueError):
    """Raised when a rule pattern does not compile."""
    pass


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> "re.Pattern":
    try:
        return re.compile(pattern, re.IGNORECASE)
    except (re.error, OverflowError, RecursionError) as e:
        raise MalformedPattern(f"Invalid pattern {pattern!r}: {e}") from e


def match(pattern: str, text: str) -> str:
    """
    Apply `pattern` to `text` and return the captured substring.

    The value comes from the first capturing group (or the whole match
    when the pattern has no groups) of the last non-empty occurrence,
    so "I am Alice" against r"(\\w+)" yields "Alice". Returns "" when
    nothing matches.
    """
    compiled = compile_pattern(pattern)
    result = ""
    for m in compiled.finditer(text):
        value = m.group(1) if compiled.groups else m.group(0)
        if value:
            result = value
    return result


def clear(text: str) -> str:
    """Remove every unresolved `[name]` placeholder."""
    return PLACEHOLDER.sub("", text)
