"""Core data models for the folder catalog.

Every persisted table has a matching immutable record type here. Rows
fetched from the store are decoded into these types by
:mod:`imgshelf.storage.rows`, so the search components never see raw
database values.

Key components:
- Folder: one cataloged image folder (``img_folders``)
- CoverImage: the folder's cover thumbnail (``cover_images``)
- FolderTag: a local ``namespace:stem`` classification keyword
- GalleryMetadata / GalleryTag: external gallery record and its tags
- FolderPreview: read-only projection used as search output
"""

import enum

import msgspec


class Category(enum.Enum):
    """Gallery categories, stored by their display name."""

    UNKNOWN = "__unknown__"
    MISC = "Misc"
    DOUJINSHI = "Doujinshi"
    MANGA = "Manga"
    ARTIST_CG = "Artist CG"
    GAME_CG = "Game CG"
    IMAGE_SET = "Image Set"
    COSPLAY = "Cosplay"
    ASIAN_PORN = "Asian Porn"
    NON_H = "Non-H"
    WESTERN = "Western"
    PRIVATE = "Private"

    @classmethod
    def from_name(cls, name: str | None) -> "Category":
        """Map a display name to a category, UNKNOWN if unrecognized."""
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN


class Folder(msgspec.Struct, frozen=True, kw_only=True):
    """A cataloged image folder.

    ``eh_gid`` is the external gallery id; the empty string means the
    folder has no external metadata attached.
    """

    fid: int
    folder_path: str
    title: str
    record_time: int
    eh_gid: str = ""

    @property
    def has_gallery(self) -> bool:
        return self.eh_gid != ""


class CoverImage(msgspec.Struct, frozen=True, kw_only=True):
    """Front cover thumbnail of a folder, base64 encoded."""

    fid: int
    cover_fname: str
    cover_base64: str


class FolderTag(msgspec.Struct, frozen=True, kw_only=True):
    """Local classification keyword rendered as ``namespace:stem``."""

    fid: int
    namespace: str
    stem: str

    @property
    def keyword(self) -> str:
        return f"{self.namespace}:{self.stem}"

    @classmethod
    def parse(cls, fid: int, text: str) -> "FolderTag":
        """Build a tag from ``namespace:stem`` text.

        Raises:
            ValueError: If the text has no namespace separator or an empty part.
        """
        namespace, sep, stem = text.partition(":")
        namespace = namespace.strip()
        stem = stem.strip()
        if not sep or not namespace or not stem:
            raise ValueError(f"Tag must look like 'namespace:stem', got {text!r}")
        return cls(fid=fid, namespace=namespace, stem=stem)


class GalleryMetadata(msgspec.Struct, frozen=True, kw_only=True):
    """External gallery record, keyed by gallery id."""

    gid: str
    token: str
    title: str
    title_jpn: str = ""
    category: Category = Category.UNKNOWN
    thumb: str = ""
    uploader: str = ""
    posted: int = 0
    filecount: int = -1
    filesize: int = -1
    expunged: int = 0
    rating: float = 0.0
    meta_updated: int = 0


class GalleryTag(msgspec.Struct, frozen=True, kw_only=True):
    gid: str
    tag: str


class TableRevision(msgspec.Struct, frozen=True, kw_only=True):
    table_name: str
    revision: int


class FolderPreview(msgspec.Struct, frozen=True, kw_only=True):
    """Folder joined with its cover thumbnail, as returned by searches.

    ``cover_base64`` is empty when the folder has no cover row.
    """

    fid: int
    folder_path: str
    title: str
    record_time: int
    cover_base64: str = ""
    eh_gid: str = ""
