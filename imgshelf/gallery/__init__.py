"""Remote gallery metadata: API client and refresh path."""

from imgshelf.gallery.client import GalleryClient, GalleryInfo
from imgshelf.gallery.exceptions import (
    GalleryApiError,
    InvalidReplyError,
    RefreshError,
    RequestRejectedError,
    UpstreamError,
)
from imgshelf.gallery.refresh import MetadataRefresher

__all__ = [
    "GalleryClient",
    "GalleryInfo",
    "MetadataRefresher",
    "GalleryApiError",
    "UpstreamError",
    "RequestRejectedError",
    "InvalidReplyError",
    "RefreshError",
]
