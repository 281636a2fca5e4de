"""Boolean include/exclude matching over keyword sets."""

import re
from collections.abc import Iterable, Mapping

from .exceptions import InvalidPatternError


def compile_patterns(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    """Compile case-insensitive patterns, failing on the first invalid one."""
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            raise InvalidPatternError(pattern, str(e)) from e
    return compiled


def matches_all(keywords: Iterable[str], patterns: list[re.Pattern[str]]) -> bool:
    """Every pattern finds at least one keyword."""
    keywords = list(keywords)
    return all(any(p.search(kw) for kw in keywords) for p in patterns)


def matches_any(keywords: Iterable[str], patterns: list[re.Pattern[str]]) -> bool:
    """Some pattern finds some keyword."""
    return any(p.search(kw) for kw in keywords for p in patterns)


def matches(
    keywords: Iterable[str],
    include: list[re.Pattern[str]],
    exclude: list[re.Pattern[str]],
) -> bool:
    """Apply include (AND over patterns) and exclude (veto on any hit).

    Patterns are searched against each keyword on its own, never against
    the keywords joined together. An empty include list accepts everything.
    """
    keywords = list(keywords)
    return matches_all(keywords, include) and not matches_any(keywords, exclude)


class BooleanRegexMatcher:
    """Filter folders by include and exclude keyword patterns.

    Both pattern lists are compiled up front, so an invalid pattern fails
    the whole search before any folder is examined.
    """

    def __init__(self, include: Iterable[str] = (), exclude: Iterable[str] = ()):
        self.include = compile_patterns(include)
        self.exclude = compile_patterns(exclude)

    def matches(self, keywords: Iterable[str]) -> bool:
        return matches(keywords, self.include, self.exclude)

    def filter(self, index: Mapping[int, Iterable[str]]) -> set[int]:
        """Return the ids whose keyword set matches."""
        return {fid for fid, keywords in index.items() if self.matches(keywords)}


def parse_query(query: str) -> tuple[list[str], list[str]]:
    """Split a search-bar query into include and exclude patterns.

    Terms are separated by spaces; a term starting with ``-`` is an
    exclude pattern. A lone ``-`` is ignored.
    """
    include: list[str] = []
    exclude: list[str] = []
    for term in query.split():
        if term.startswith("-"):
            if len(term) > 1:
                exclude.append(term[1:])
        else:
            include.append(term)
    return include, exclude
