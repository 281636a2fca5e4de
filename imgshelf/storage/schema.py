"""Declarative table definitions.

Each persisted table is described once by a :class:`TableSchema`. The
fixed :data:`TABLES` registry is what the SQLite backend walks when it
opens a store: missing tables are created and their revision recorded in
``table_revision``; an existing table whose recorded revision differs
from the one declared here is a hard failure.
"""

from dataclasses import dataclass

from imgshelf.core.models import (
    CoverImage,
    Folder,
    FolderTag,
    GalleryMetadata,
    GalleryTag,
    TableRevision,
)


@dataclass(frozen=True)
class TableSchema:
    """Name, revision and DDL of one table, plus its record type."""

    name: str
    revision: int
    create_sql: str
    record: type


REVISIONS = TableSchema(
    name="table_revision",
    revision=1,
    record=TableRevision,
    create_sql="""
        CREATE TABLE IF NOT EXISTS table_revision(
            table_name TEXT PRIMARY KEY,
            revision INTEGER NOT NULL
        )
    """,
)

FOLDERS = TableSchema(
    name="img_folders",
    revision=1,
    record=Folder,
    create_sql="""
        CREATE TABLE IF NOT EXISTS img_folders(
            fid INTEGER PRIMARY KEY,
            folder_path TEXT UNIQUE NOT NULL,
            title TEXT NOT NULL,
            record_time INTEGER NOT NULL,  -- unix seconds
            eh_gid TEXT NOT NULL           -- '' when no gallery is linked
        )
    """,
)

COVERS = TableSchema(
    name="cover_images",
    revision=1,
    record=CoverImage,
    create_sql="""
        CREATE TABLE IF NOT EXISTS cover_images(
            fid INTEGER UNIQUE NOT NULL,
            cover_fname TEXT NOT NULL,
            cover_base64 TEXT NOT NULL
        )
    """,
)

FOLDER_TAGS = TableSchema(
    name="folder_tags",
    revision=1,
    record=FolderTag,
    create_sql="""
        CREATE TABLE IF NOT EXISTS folder_tags(
            fid INTEGER NOT NULL,
            namespace TEXT NOT NULL,
            stem TEXT NOT NULL
        )
    """,
)

GALLERY_METADATA = TableSchema(
    name="ehentai_metadata",
    revision=1,
    record=GalleryMetadata,
    create_sql="""
        CREATE TABLE IF NOT EXISTS ehentai_metadata(
            gid TEXT PRIMARY KEY,
            token TEXT NOT NULL,
            title TEXT NOT NULL,
            title_jpn TEXT NOT NULL,
            category TEXT NOT NULL,
            thumb TEXT NOT NULL,
            uploader TEXT NOT NULL,
            posted INTEGER NOT NULL,
            filecount INTEGER NOT NULL,    -- -1 when unknown
            filesize INTEGER NOT NULL,     -- -1 when unknown
            expunged INTEGER NOT NULL,
            rating REAL NOT NULL,
            meta_updated INTEGER NOT NULL  -- unix seconds of last refresh
        )
    """,
)

GALLERY_TAGS = TableSchema(
    name="ehentai_tags",
    revision=1,
    record=GalleryTag,
    create_sql="""
        CREATE TABLE IF NOT EXISTS ehentai_tags(
            gid TEXT NOT NULL,
            tag TEXT NOT NULL
        )
    """,
)

TABLES: tuple[TableSchema, ...] = (
    FOLDERS,
    COVERS,
    FOLDER_TAGS,
    GALLERY_METADATA,
    GALLERY_TAGS,
)


def get_table(name: str) -> TableSchema:
    """Look up a registered table by name."""
    for table in (REVISIONS, *TABLES):
        if table.name == name:
            return table
    raise KeyError(f"Unknown table: {name}")
