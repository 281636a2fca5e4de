"""Repositories for catalog data access.

Typed read and write operations over the SQLite backend. Reads decode
rows into the record structs of :mod:`imgshelf.core.models`; writes run
inside the backend's transaction so partial inserts never persist.
"""

import logging
import time

from imgshelf.core.models import (
    CoverImage,
    Folder,
    FolderPreview,
    FolderTag,
    GalleryMetadata,
)

from .backends.sqlite import SQLiteBackend
from .exceptions import QueryError, TransactionRequiredError
from .rows import decode_row, decode_rows, encode_record

logger = logging.getLogger(__name__)


class FolderRepository:
    """Repository for cataloged folders, their covers and local tags."""

    def __init__(self, backend: SQLiteBackend):
        self.backend = backend

    def find(self, fid: int) -> Folder | None:
        row = self.backend.query_one("SELECT * FROM img_folders WHERE fid = ?", (fid,))
        return decode_row(row, Folder) if row else None

    def find_by_path(self, folder_path: str) -> Folder | None:
        row = self.backend.query_one(
            "SELECT * FROM img_folders WHERE folder_path = ?", (folder_path,)
        )
        return decode_row(row, Folder) if row else None

    def find_all(self) -> list[Folder]:
        rows = self.backend.query("SELECT * FROM img_folders ORDER BY fid")
        return decode_rows(rows, Folder)

    def count(self) -> int:
        return self.backend.query_scalar("SELECT COUNT(*) FROM img_folders")

    def max_fid(self) -> int:
        """Largest folder id in use, 0 for an empty catalog."""
        value = self.backend.query_scalar("SELECT MAX(fid) FROM img_folders")
        if value is None:
            return 0
        if not isinstance(value, int):
            raise QueryError(f"Invalid max fid value: {value!r}")
        return value

    def list_folder_paths(self) -> set[str]:
        rows = self.backend.query("SELECT folder_path FROM img_folders")
        return {row["folder_path"] for row in rows}

    def list_previews(self) -> list[FolderPreview]:
        """All folders joined with their cover thumbnail.

        Rows with an empty path or title are skipped and logged.
        """
        start = time.perf_counter()
        rows = self.backend.query("""
            SELECT f.fid AS fid, f.folder_path AS folder_path, f.title AS title,
                   f.record_time AS record_time,
                   COALESCE(c.cover_base64, '') AS cover_base64, f.eh_gid AS eh_gid
            FROM img_folders AS f LEFT JOIN cover_images AS c ON f.fid = c.fid
            ORDER BY f.fid
        """)

        previews = []
        for row in rows:
            preview = decode_row(row, FolderPreview)
            if not preview.folder_path or not preview.title:
                logger.error(f"Skipping malformed folder row fid={preview.fid}")
                continue
            previews.append(preview)

        elapsed = (time.perf_counter() - start) * 1000
        logger.info(f"Listed {len(previews)} folder previews in {elapsed:.1f}ms")
        return previews

    def find_cover(self, fid: int) -> CoverImage | None:
        row = self.backend.query_one("SELECT * FROM cover_images WHERE fid = ?", (fid,))
        if row is None:
            logger.warning(f"No cover image for fid={fid}")
            return None
        return decode_row(row, CoverImage)

    def tags(self, fid: int) -> list[FolderTag]:
        rows = self.backend.query(
            "SELECT * FROM folder_tags WHERE fid = ? ORDER BY namespace, stem", (fid,)
        )
        return decode_rows(rows, FolderTag)

    def add(self, folder: Folder, cover: CoverImage | None = None) -> None:
        """Insert a folder and optionally its cover."""
        with self.backend.transaction():
            self.backend.execute(
                """
                INSERT INTO img_folders(fid, folder_path, title, record_time, eh_gid)
                VALUES(:fid, :folder_path, :title, :record_time, :eh_gid)
                """,
                encode_record(folder),
            )
            if cover is not None:
                self.backend.execute(
                    """
                    INSERT INTO cover_images(fid, cover_fname, cover_base64)
                    VALUES(:fid, :cover_fname, :cover_base64)
                    """,
                    encode_record(cover),
                )

    def add_tag(self, tag: FolderTag) -> None:
        with self.backend.transaction():
            self.backend.execute(
                "INSERT INTO folder_tags(fid, namespace, stem) VALUES(:fid, :namespace, :stem)",
                encode_record(tag),
            )

    def remove_tag(self, tag: FolderTag) -> bool:
        with self.backend.transaction():
            cursor = self.backend.execute(
                "DELETE FROM folder_tags WHERE fid = ? AND namespace = ? AND stem = ?",
                (tag.fid, tag.namespace, tag.stem),
            )
        return cursor.rowcount > 0

    def link_gallery(self, fid: int, gid: str) -> bool:
        """Attach a gallery id to a folder; an empty gid detaches it."""
        with self.backend.transaction():
            cursor = self.backend.execute(
                "UPDATE img_folders SET eh_gid = ? WHERE fid = ?", (gid, fid)
            )
        return cursor.rowcount > 0


class GalleryRepository:
    """Repository for external gallery metadata and tags."""

    def __init__(self, backend: SQLiteBackend):
        self.backend = backend

    def find(self, gid: str) -> GalleryMetadata | None:
        row = self.backend.query_one("SELECT * FROM ehentai_metadata WHERE gid = ?", (gid,))
        return decode_row(row, GalleryMetadata) if row else None

    def find_by_fid(self, fid: int) -> GalleryMetadata | None:
        row = self.backend.query_one(
            """
            SELECT em.* FROM ehentai_metadata AS em
            INNER JOIN img_folders AS f ON f.eh_gid = em.gid
            WHERE f.fid = ?
            """,
            (fid,),
        )
        return decode_row(row, GalleryMetadata) if row else None

    def tags(self, gid: str) -> list[str]:
        rows = self.backend.query(
            "SELECT tag FROM ehentai_tags WHERE gid = ? ORDER BY rowid", (gid,)
        )
        return [row["tag"] for row in rows if row["tag"]]

    def insert(self, record: GalleryMetadata) -> None:
        with self.backend.transaction():
            self.backend.execute(
                """
                INSERT INTO ehentai_metadata(
                    gid, token, title, title_jpn, category, thumb, uploader, posted,
                    filecount, filesize, expunged, rating, meta_updated
                ) VALUES(
                    :gid, :token, :title, :title_jpn, :category, :thumb, :uploader,
                    :posted, :filecount, :filesize, :expunged, :rating, :meta_updated
                )
                """,
                encode_record(record),
            )

    def replace_tags(self, gid: str, tags: list[str]) -> None:
        """Replace the whole tag set of a gallery. Requires a transaction."""
        if not self.backend.in_transaction:
            raise TransactionRequiredError("replace_tags")
        self.backend.execute("DELETE FROM ehentai_tags WHERE gid = ?", (gid,))
        for tag in tags:
            cursor = self.backend.execute(
                "INSERT INTO ehentai_tags(gid, tag) VALUES(?, ?)", (gid, tag)
            )
            if cursor.rowcount != 1:
                raise QueryError(f"Tag insert affected {cursor.rowcount} rows")

    def replace_gallery_metadata(self, record: GalleryMetadata, tags: list[str]) -> None:
        """Delete then reinsert a gallery record and its tags.

        Must run inside a transaction so readers never see the record
        deleted without its replacement.

        Raises:
            TransactionRequiredError: If no transaction is open.
        """
        if not self.backend.in_transaction:
            raise TransactionRequiredError("replace_gallery_metadata")
        self.backend.execute("DELETE FROM ehentai_metadata WHERE gid = ?", (record.gid,))
        self.insert(record)
        self.replace_tags(record.gid, tags)
        logger.info(f"Replaced metadata for gallery {record.gid} with {len(tags)} tags")
