"""Exception classes for the gallery metadata client."""


class GalleryApiError(Exception):
    """Base exception for gallery API failures."""

    pass


class UpstreamError(GalleryApiError):
    """Raised when the API cannot be reached or fails after retries."""

    pass


class RequestRejectedError(GalleryApiError):
    """Raised when the API rejects the request (HTTP 4xx)."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status


class InvalidReplyError(GalleryApiError):
    """Raised when a reply is malformed, reports an error or describes another gallery."""

    def __init__(self, gid: str, details: str):
        self.gid = gid
        super().__init__(f"Invalid metadata reply for gallery {gid}: {details}")


class RetryableResponseError(Exception):
    """Internal exception used to trigger retries for retryable responses."""

    def __init__(self, response):
        super().__init__("Retryable response received")
        self.response = response


class RefreshError(GalleryApiError):
    """Raised when a folder's metadata cannot be refreshed."""

    def __init__(self, fid: int, details: str):
        self.fid = fid
        super().__init__(f"Cannot refresh folder {fid}: {details}")
