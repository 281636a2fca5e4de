"""Catalog storage layer.

- **SQLite backend**: one shared connection, schema revision checks,
  run-in-transaction primitive
- **Schema registry**: declarative table definitions with revisions
- **Row decoding**: strict conversion of rows into record structs
- **Repositories**: typed access to folders, covers, tags and gallery data
- **Importers**: folder-tree scanning with cover thumbnails
"""

# Backend
from imgshelf.storage.backends.sqlite import SQLiteBackend

# Errors
from imgshelf.storage.exceptions import (
    FolderImportError,
    QueryError,
    RowDecodeError,
    SchemaRevisionMismatchError,
    StorageError,
    StoreUnavailableError,
    TransactionRequiredError,
)

# Repositories
from imgshelf.storage.repository import FolderRepository, GalleryRepository

# Rows and schema
from imgshelf.storage.rows import decode_row, decode_rows
from imgshelf.storage.schema import TABLES, TableSchema, get_table

__all__ = [
    # Backend
    "SQLiteBackend",
    # Errors
    "StorageError",
    "FolderImportError",
    "StoreUnavailableError",
    "QueryError",
    "SchemaRevisionMismatchError",
    "RowDecodeError",
    "TransactionRequiredError",
    # Repositories
    "FolderRepository",
    "GalleryRepository",
    # Rows and schema
    "decode_row",
    "decode_rows",
    "TABLES",
    "TableSchema",
    "get_table",
]
