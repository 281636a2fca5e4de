"""Refresh a folder's linked gallery metadata from the API."""

import logging
from concurrent.futures import CancelledError, TimeoutError

from imgshelf.storage.backends.sqlite import SQLiteBackend
from imgshelf.storage.repository import FolderRepository, GalleryRepository

from .client import GalleryClient, GalleryInfo
from .exceptions import GalleryApiError, RefreshError

logger = logging.getLogger(__name__)


class MetadataRefresher:
    """Fetch and store the gallery record linked to a folder.

    The fetch completes before any write begins; the stored record and
    its tag set are then replaced in a single transaction.
    """

    def __init__(self, backend: SQLiteBackend, client: GalleryClient, timeout: float | None = 60.0):
        self.backend = backend
        self.client = client
        self.timeout = timeout
        self.folders = FolderRepository(backend)
        self.galleries = GalleryRepository(backend)

    def resolve(self, fid: int, token: str | None = None) -> tuple[str, str]:
        """Find the gallery id and token to fetch for a folder.

        Without an explicit token the one stored with the gallery's
        previous record is used.
        """
        folder = self.folders.find(fid)
        if folder is None:
            raise RefreshError(fid, "no such folder")
        if not folder.has_gallery:
            raise RefreshError(fid, "folder is not linked to a gallery")
        if token:
            return folder.eh_gid, token

        existing = self.galleries.find(folder.eh_gid)
        if existing is None or not existing.token:
            raise RefreshError(fid, f"no token known for gallery {folder.eh_gid}")
        return folder.eh_gid, existing.token

    def refresh(self, fid: int, token: str | None = None) -> GalleryInfo:
        """Fetch the folder's gallery metadata and replace the stored copy.

        Args:
            fid: Folder id
            token: Gallery token, defaults to the stored one

        Returns:
            The fetched gallery record and tags

        Raises:
            RefreshError: If the folder cannot be resolved, the fetch fails
                or is cancelled, or the write is rolled back
        """
        gid, token = self.resolve(fid, token)
        future = self.client.fetch_metadata_async(gid, token)
        try:
            info = future.result(timeout=self.timeout)
        except CancelledError as e:
            raise RefreshError(fid, "fetch was cancelled") from e
        except TimeoutError as e:
            future.cancel()
            raise RefreshError(fid, "fetch timed out") from e
        except GalleryApiError as e:
            logger.error(f"Failed to fetch gallery {gid}: {e}")
            raise RefreshError(fid, str(e)) from e

        def write(backend: SQLiteBackend) -> bool:
            GalleryRepository(backend).replace_gallery_metadata(info.metadata, info.tags)
            return True

        if error := self.backend.run_in_transaction(write):
            raise RefreshError(fid, error)
        return info
