"""Similar-title matching.

Titles are compared on their stem (the text after bracketed prefixes)
using the longest common substring, with an extra shortcut: a candidate
sharing any meaningful prefix token with the base title (circle, artist,
series) also matches.
"""

import logging
import re
import unicodedata
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

import msgspec

from imgshelf.core.titles import TitleParseError, TitleParser

logger = logging.getLogger(__name__)

T = TypeVar("T")

NON_WORD = re.compile(r"\W")


def nfkc(text: str) -> str:
    return unicodedata.normalize("NFKC", text)


def strip_non_word(text: str) -> str:
    return NON_WORD.sub("", text)


def lcs_span(a: str, b: str) -> tuple[int, int]:
    """Locate the longest common substring of ``a`` and ``b``.

    Dynamic programming over one rolling row indexed by position in
    ``a``, one pass per character of ``b``. A run only replaces the best
    one when strictly longer, so among equal-length runs the first found
    wins: earliest position in ``b``, then leftmost end in ``a``.

    Returns:
        ``(start, length)`` of the substring within ``a``; ``(0, 0)`` if
        there is no common character.
    """
    if not a or not b:
        return 0, 0

    row = [0] * len(a)
    best_len = 0
    best_end = 0
    for ch in b:
        diagonal = 0  # row[i - 1] from the previous pass
        for i, ach in enumerate(a):
            previous = row[i]
            if ach == ch:
                row[i] = diagonal + 1
                if row[i] > best_len:
                    best_len = row[i]
                    best_end = i
            else:
                row[i] = 0
            diagonal = previous

    if best_len == 0:
        return 0, 0
    return best_end - best_len + 1, best_len


def lcs(a: str, b: str) -> str:
    """Longest contiguous substring shared by ``a`` and ``b``."""
    start, length = lcs_span(a, b)
    return a[start : start + length]


@dataclass
class SimilarityConfig:
    """Thresholds for similar-title matching.

    ``min_match_length`` is also the length below which a candidate is
    treated as too short for ratio scoring.
    """

    min_match_length: int = 4
    min_match_ratio: float = 0.4
    ignore_too_short_candidates: bool = True
    enable_prefix_matching: bool = True
    ignore_prefix_pattern: str = r"^[A-Za-z][0-9]{2}$"

    def __post_init__(self) -> None:
        if self.min_match_length < 1:
            raise ValueError("min_match_length must be at least 1")
        if not 0.0 <= self.min_match_ratio <= 1.0:
            raise ValueError("min_match_ratio must be between 0 and 1")
        try:
            re.compile(self.ignore_prefix_pattern)
        except re.error as e:
            raise ValueError(f"invalid ignore_prefix_pattern: {e}") from e

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SimilarityConfig":
        """Build from a config mapping, ignoring unknown keys.

        Values are type checked strictly, so ``min_match_length: "4"`` is
        rejected here rather than failing later inside a search.

        Raises:
            ValueError: If a value has the wrong type or is out of range.
        """
        if not data:
            return cls()
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        try:
            return msgspec.convert(known, type=cls, strict=True)
        except (msgspec.ValidationError, ValueError) as e:
            raise ValueError(f"Invalid similarity config: {e}") from e


@dataclass
class SimilarityKey:
    """Normalized prefixes and stem of a base title."""

    prefixes: list[str]
    stem: str


class FuzzyTitleMatcher:
    """Select candidates whose title resembles a base title."""

    def __init__(self, config: SimilarityConfig | None = None, parser: TitleParser | None = None):
        self.config = config or SimilarityConfig()
        self.parser = parser or TitleParser()
        self._ignore_prefix = re.compile(self.config.ignore_prefix_pattern)

    def prepare(self, base_title: str) -> SimilarityKey | TitleParseError:
        """Normalize and parse the base title into a comparison key.

        Prefix tokens that look like release batch codes (``C89``) are
        dropped, as are tokens left empty after stripping punctuation.
        """
        parts = self.parser.parse_prefix_stem(nfkc(base_title))
        if isinstance(parts, TitleParseError):
            return parts

        logger.debug(f"prefixes: {parts.prefixes} stem: {parts.stem!r}")
        prefixes = [
            token
            for token in (strip_non_word(p) for p in parts.prefixes)
            if token and not self._ignore_prefix.match(token)
        ]
        return SimilarityKey(prefixes=prefixes, stem=strip_non_word(parts.stem))

    def is_similar(self, candidate: str, key: SimilarityKey) -> bool:
        """Decide whether one candidate title matches the key."""
        config = self.config
        text = strip_non_word(nfkc(candidate))

        if config.enable_prefix_matching and any(p in text for p in key.prefixes):
            return True

        lcs_len = lcs_span(text, key.stem)[1]
        min_len = min(len(text), len(key.stem))
        if len(text) < config.min_match_length:
            return not config.ignore_too_short_candidates and lcs_len >= min_len
        return lcs_len >= config.min_match_length and lcs_len > min_len * config.min_match_ratio

    def filter_prepared(
        self, candidates: Sequence[T], key: SimilarityKey, text_of: Callable[[T], str] = str
    ) -> list[T]:
        return [c for c in candidates if self.is_similar(text_of(c), key)]

    def filter_similar(
        self, candidates: Sequence[T], base_title: str, text_of: Callable[[T], str] = str
    ) -> list[T]:
        """Return the candidates similar to ``base_title``, in input order.

        An unparsable base title (unbalanced brackets) yields no matches.
        """
        key = self.prepare(base_title)
        if isinstance(key, TitleParseError):
            logger.warning(f"Cannot parse title {base_title!r}: {key}")
            return []
        return self.filter_prepared(candidates, key, text_of)
