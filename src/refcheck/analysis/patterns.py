"""Glob-style pattern matching for reference filtering.

Only two wildcards exist: ``*`` matches any run of characters (including
none) and ``?`` matches exactly one. Everything else, including the
namespace separator ``\\`` and the key separator ``.``, is literal and the
whole candidate must match.
"""
import re
from functools import lru_cache
from typing import Iterable, Optional, Sequence


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern:
    """Translate a glob (``*`` any run, ``?`` one character) into a regex."""
    parts = []
    for char in pattern:
        if char == '*':
            parts.append('.*')
        elif char == '?':
            parts.append('.')
        else:
            parts.append(re.escape(char))
    return re.compile(''.join(parts), re.DOTALL)


def matches(candidate: str, pattern: str) -> bool:
    """Return True if ``candidate`` fully matches the glob ``pattern``."""
    return compile_pattern(pattern).fullmatch(candidate) is not None


def matches_any(candidate: str, patterns: Iterable[str]) -> bool:
    return any(matches(candidate, pattern) for pattern in patterns)


class PatternFilter:
    """Include/ignore filter applied to every extracted reference.

    ``include=None`` keeps everything; an empty include list keeps nothing.
    Ignore patterns always win over include patterns.
    """

    def __init__(self, include: Optional[Sequence[str]] = None, ignore: Sequence[str] = ()):
        self.include = tuple(include) if include is not None else None
        self.ignore = tuple(ignore)

    def allows(self, candidate: str) -> bool:
        if self.include is not None and not matches_any(candidate, self.include):
            return False
        return not matches_any(candidate, self.ignore)

    def __repr__(self) -> str:
        return f"PatternFilter(include={self.include!r}, ignore={self.ignore!r})"
