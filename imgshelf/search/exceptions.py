"""Exception classes for the search engine."""

from imgshelf.storage.exceptions import QueryError


class SearchError(Exception):
    """Base exception for search-related errors."""

    pass


class InvalidPatternError(SearchError, ValueError):
    """Raised when a keyword pattern is not a valid regular expression."""

    def __init__(self, pattern: str, details: str = ""):
        """Initialize with the offending pattern."""
        self.pattern = pattern
        message = f"Invalid search pattern {pattern!r}"
        if details:
            message += f": {details}"
        super().__init__(message)


class KeywordIndexUnavailableError(SearchError, QueryError):
    """Raised when the keyword index cannot be built."""

    def __init__(self, details: str):
        """Initialize with the underlying failure."""
        super().__init__(f"Keyword index unavailable: {details}")
