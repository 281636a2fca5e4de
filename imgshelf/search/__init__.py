"""Retrieval engine for the folder catalog.

- **Keyword index**: per-folder keyword sets aggregated from tags and titles
- **Boolean matcher**: include/exclude regex filtering with exclude veto
- **Similarity**: longest-common-substring scoring of bracket-aware titles
- **Service**: search calls returning explicit outcome values
"""

from imgshelf.search.exceptions import (
    InvalidPatternError,
    KeywordIndexUnavailableError,
    SearchError,
)
from imgshelf.search.keywords import KeywordIndex, KeywordIndexBuilder, build_keyword_index
from imgshelf.search.matcher import BooleanRegexMatcher, compile_patterns, matches, parse_query
from imgshelf.search.results import ResultStatus, SearchOutcome
from imgshelf.search.service import SearchService
from imgshelf.search.similarity import (
    FuzzyTitleMatcher,
    SimilarityConfig,
    SimilarityKey,
    lcs,
    lcs_span,
)

__all__ = [
    # Errors
    "SearchError",
    "InvalidPatternError",
    "KeywordIndexUnavailableError",
    # Keywords
    "KeywordIndex",
    "KeywordIndexBuilder",
    "build_keyword_index",
    # Matching
    "BooleanRegexMatcher",
    "compile_patterns",
    "matches",
    "parse_query",
    "FuzzyTitleMatcher",
    "SimilarityConfig",
    "SimilarityKey",
    "lcs",
    "lcs_span",
    # Service
    "SearchService",
    "SearchOutcome",
    "ResultStatus",
]
