"""HTTP client for the gallery metadata API.

One call is supported: ``gdata``, which returns the metadata record and
tag list of a gallery identified by its id and token.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import msgspec
import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from imgshelf import __version__
from imgshelf.core.models import Category, GalleryMetadata

from .exceptions import (
    InvalidReplyError,
    RequestRejectedError,
    RetryableResponseError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

API_URL = "https://e-hentai.org/api.php"

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": f"imgshelf/{__version__}",
    "Accept": "application/json",
}

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class GalleryItem(msgspec.Struct, kw_only=True):
    """One ``gmetadata`` entry as sent by the API.

    Numeric fields arrive as strings and are converted leniently.
    """

    gid: int = 0
    token: str = ""
    title: str = ""
    title_jpn: str = ""
    category: str = ""
    thumb: str = ""
    uploader: str = ""
    posted: int = 0
    filecount: int = -1
    filesize: int = -1
    expunged: bool = False
    rating: float = 0.0
    tags: list[str] = msgspec.field(default_factory=list)
    error: str | None = None


class GalleryReply(msgspec.Struct):
    gmetadata: list[GalleryItem] = msgspec.field(default_factory=list)


class GalleryInfo(msgspec.Struct, frozen=True, kw_only=True):
    """Fetched gallery record together with its tags."""

    metadata: GalleryMetadata
    tags: list[str]


class GalleryClient:
    """Client for the gallery ``gdata`` API call.

    Transport errors and retryable status codes are retried with
    exponential backoff. Asynchronous fetches run on a small worker pool
    and are delivered as :class:`concurrent.futures.Future` objects.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        api_url: str = API_URL,
        timeout: float = 10.0,
        max_workers: int = 2,
    ):
        self.session = session or requests.Session()
        for key, value in DEFAULT_HEADERS.items():
            self.session.headers.setdefault(key, value)
        self.api_url = api_url
        self.timeout = timeout
        self.max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None

    @retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
        retry=retry_if_exception_type((requests.RequestException, RetryableResponseError)),
    )
    def _send(self, payload: dict[str, Any]) -> requests.Response:
        response = self.session.request(
            "POST", self.api_url, json=payload, timeout=self.timeout
        )
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableResponseError(response)
        return response

    def _post(self, payload: dict[str, Any]) -> requests.Response:
        try:
            response = self._send(payload)
        except RetryableResponseError as e:
            response = e.response
        except requests.RequestException as e:
            raise UpstreamError(f"Request failed: {e}") from e

        status = response.status_code
        if 500 <= status < 600 or status == 429:
            raise UpstreamError(f"Upstream service error ({status})")
        if 400 <= status < 500:
            raise RequestRejectedError(status, f"Request rejected ({status})")
        return response

    def fetch_metadata(self, gid: str, token: str) -> GalleryInfo:
        """Fetch one gallery's metadata and tags.

        Args:
            gid: Gallery id
            token: Gallery access token

        Returns:
            GalleryInfo stamped with the fetch time

        Raises:
            GalleryApiError: On transport failure, HTTP error or invalid reply
        """
        try:
            numeric_gid = int(gid)
        except ValueError as e:
            raise InvalidReplyError(gid, "gallery id is not numeric") from e

        payload = {"method": "gdata", "gidlist": [[numeric_gid, token]], "namespace": 1}
        logger.debug(f"Fetching metadata for gallery {gid}")
        response = self._post(payload)
        return self.parse_reply(gid, response.content)

    def parse_reply(self, gid: str, content: bytes) -> GalleryInfo:
        """Validate and decode a ``gdata`` reply body."""
        try:
            reply = msgspec.json.decode(content, type=GalleryReply, strict=False)
        except msgspec.DecodeError as e:
            raise InvalidReplyError(gid, str(e)) from e

        if not reply.gmetadata:
            raise InvalidReplyError(gid, "reply missing item in gmetadata")
        item = reply.gmetadata[0]
        if str(item.gid) != gid:
            raise InvalidReplyError(gid, f"reply describes gallery {item.gid}")
        if item.error is not None:
            raise InvalidReplyError(gid, item.error)
        if not item.title or not item.token:
            raise InvalidReplyError(gid, "reply has no title or token")

        metadata = GalleryMetadata(
            gid=gid,
            token=item.token,
            title=item.title,
            title_jpn=item.title_jpn,
            category=Category.from_name(item.category),
            thumb=item.thumb,
            uploader=item.uploader,
            posted=item.posted,
            filecount=item.filecount,
            filesize=item.filesize,
            expunged=int(item.expunged),
            rating=item.rating,
            meta_updated=int(time.time()),
        )
        tags = [tag for tag in item.tags if tag]
        logger.info(f"Fetched gallery {gid} with {len(tags)} tags")
        return GalleryInfo(metadata=metadata, tags=tags)

    def fetch_metadata_async(self, gid: str, token: str) -> "Future[GalleryInfo]":
        """Start a fetch on the worker pool.

        The returned future raises the same errors as :meth:`fetch_metadata`.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="gallery-fetch"
            )
        return self._executor.submit(self.fetch_metadata, gid, token)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self.session.close()

    def __enter__(self) -> "GalleryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
