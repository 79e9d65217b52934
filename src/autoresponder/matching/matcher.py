"""Compile transport patterns into URL predicates."""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Pattern

from ..errors import MatcherError
from ..rules.models import TransportTag

MATCHER_CACHE_SIZE = 1024


def wildcard_to_regex(pattern: str) -> str:
    """
    Translate a `*` wildcard pattern into an anchored regular expression.

    `*` matches any run of characters, including none; every other
    character matches itself.
    """
    return "".join(".*" if part == "*" else re.escape(part) for part in re.split(r"(\*)", pattern))


@dataclass(frozen=True)
class Matcher:
    """Predicate over full URL strings for one transport pattern."""

    pattern: str
    tag: TransportTag
    _regex: Pattern[str] = field(repr=False, compare=False)

    def test(self, url: str) -> bool:
        if self.tag == TransportTag.REGEX:
            return self._regex.search(url) is not None
        return self._regex.fullmatch(url) is not None


@lru_cache(maxsize=MATCHER_CACHE_SIZE)
def _compile(pattern: str, tag: TransportTag) -> Matcher:
    source = pattern if tag == TransportTag.REGEX else wildcard_to_regex(pattern)
    try:
        # DOTALL so `*` also spans newlines in odd URLs
        regex = re.compile(source, re.DOTALL if tag == TransportTag.URL_FILTER else 0)
    except re.error as exc:
        raise MatcherError(f"Invalid regex {pattern!r}: {exc}") from exc
    return Matcher(pattern=pattern, tag=tag, _regex=regex)


def compile_matcher(pattern: str, tag: TransportTag | str) -> Matcher:
    """
    Compile a transport pattern into a Matcher.

    Matchers are cached on (pattern, tag), so an unchanged rule is never
    recompiled across compilation passes.

    Raises:
        MatcherError: Empty pattern, unknown tag or invalid regex
    """
    if not pattern:
        raise MatcherError("Pattern must not be empty")
    try:
        tag = TransportTag(tag)
    except ValueError as exc:
        raise MatcherError(f"Unknown match type: {tag!r}") from exc
    return _compile(pattern, tag)


def clear_matcher_cache() -> None:
    _compile.cache_clear()
