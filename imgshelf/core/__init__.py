"""Core domain models and title parsing for the folder catalog."""

# Models
from imgshelf.core.models import (
    Category,
    CoverImage,
    Folder,
    FolderPreview,
    FolderTag,
    GalleryMetadata,
    GalleryTag,
    TableRevision,
)

# Title parsing
from imgshelf.core.titles import (
    BRACKET_PAIRS,
    Component,
    TitleParseError,
    TitleParser,
    TitleParts,
)

__all__ = [
    # Models
    "Category",
    "CoverImage",
    "Folder",
    "FolderPreview",
    "FolderTag",
    "GalleryMetadata",
    "GalleryTag",
    "TableRevision",
    # Title parsing
    "BRACKET_PAIRS",
    "Component",
    "TitleParseError",
    "TitleParser",
    "TitleParts",
]
