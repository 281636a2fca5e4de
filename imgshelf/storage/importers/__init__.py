"""Importers that populate the catalog from disk."""

from imgshelf.storage.importers.folders import (
    FolderImporter,
    ImportReport,
    make_thumbnail,
    scan_folders,
)

__all__ = ["FolderImporter", "ImportReport", "make_thumbnail", "scan_folders"]
