"""Search service over the folder catalog.

Coordinates keyword aggregation, boolean matching and similar-title
matching, and turns engine failures into :class:`SearchOutcome` values so
callers never need to catch search or storage exceptions.
"""

import logging
import time
from collections.abc import Iterable

from imgshelf.core.models import FolderPreview
from imgshelf.core.titles import TitleParseError
from imgshelf.storage.backends.sqlite import SQLiteBackend
from imgshelf.storage.exceptions import QueryError, StorageError, StoreUnavailableError
from imgshelf.storage.repository import FolderRepository

from .exceptions import InvalidPatternError
from .keywords import KeywordIndexBuilder
from .matcher import BooleanRegexMatcher
from .results import ResultStatus, SearchOutcome
from .similarity import FuzzyTitleMatcher, SimilarityConfig

logger = logging.getLogger(__name__)


class SearchService:
    """Boolean keyword search and similar-title search.

    Results keep the catalog's iteration order (ascending ``fid``); no
    ranking is applied.
    """

    def __init__(self, backend: SQLiteBackend, similarity_config: SimilarityConfig | None = None):
        """Initialize search service.

        Args:
            backend: Open catalog backend
            similarity_config: Thresholds for similar-title search
        """
        self.backend = backend
        self.folders = FolderRepository(backend)
        self.index_builder = KeywordIndexBuilder(backend)
        self.title_matcher = FuzzyTitleMatcher(similarity_config)

    def search(self, include: Iterable[str] = (), exclude: Iterable[str] = ()) -> SearchOutcome:
        """Find folders whose keywords match every include pattern and no exclude pattern.

        Patterns are case-insensitive regular expressions searched against
        each keyword separately. With no include patterns every folder that
        has at least one keyword and survives the exclude list is returned.

        Args:
            include: Patterns that must each match some keyword
            exclude: Patterns none of which may match any keyword

        Returns:
            SearchOutcome with the matching previews, or a failed outcome
        """
        start = time.perf_counter()
        try:
            matcher = BooleanRegexMatcher(include, exclude)
            index = self.index_builder.build()

            match_start = time.perf_counter()
            matched = matcher.filter(index)
            elapsed = (time.perf_counter() - match_start) * 1000
            logger.info(f"Matched {len(matched)} of {len(index)} folders in {elapsed:.1f}ms")

            previews = [p for p in self.folders.list_previews() if p.fid in matched]
        except InvalidPatternError as e:
            logger.warning(str(e))
            return SearchOutcome.failed(ResultStatus.INVALID_PATTERN, str(e))
        except StoreUnavailableError as e:
            return SearchOutcome.failed(ResultStatus.STORE_UNAVAILABLE, str(e))
        except QueryError as e:
            return SearchOutcome.failed(ResultStatus.QUERY_FAILED, str(e))
        except StorageError as e:
            logger.error(f"Unreadable catalog data: {e}")
            return SearchOutcome.failed(ResultStatus.QUERY_FAILED, str(e))

        outcome = SearchOutcome.succeeded(previews)
        outcome.duration_ms = int((time.perf_counter() - start) * 1000)
        return outcome

    def search_similar(self, title: str) -> SearchOutcome:
        """Find folders whose title resembles ``title``.

        A title with unbalanced brackets cannot be parsed; the search then
        succeeds with no results and a warning.
        """
        start = time.perf_counter()
        key = self.title_matcher.prepare(title)
        if isinstance(key, TitleParseError):
            message = f"Cannot parse title {title!r}: {key}"
            logger.warning(message)
            return SearchOutcome.succeeded([], warnings=[message])

        try:
            previews = self.folders.list_previews()
        except StoreUnavailableError as e:
            return SearchOutcome.failed(ResultStatus.STORE_UNAVAILABLE, str(e))
        except QueryError as e:
            return SearchOutcome.failed(ResultStatus.QUERY_FAILED, str(e))
        except StorageError as e:
            logger.error(f"Unreadable catalog data: {e}")
            return SearchOutcome.failed(ResultStatus.QUERY_FAILED, str(e))

        match_start = time.perf_counter()
        similar = self.title_matcher.filter_prepared(previews, key, _preview_title)
        elapsed = (time.perf_counter() - match_start) * 1000
        logger.info(f"Matched {len(similar)} of {len(previews)} titles in {elapsed:.1f}ms")

        outcome = SearchOutcome.succeeded(similar)
        outcome.duration_ms = int((time.perf_counter() - start) * 1000)
        return outcome


def _preview_title(preview: FolderPreview) -> str:
    return preview.title
