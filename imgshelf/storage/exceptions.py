"""Exception classes for the storage layer."""


class StorageError(Exception):
    """Base exception for storage-related errors."""

    pass


class StoreUnavailableError(StorageError):
    """Raised when the database cannot be opened or the connection is gone."""

    def __init__(self, path: str, details: str = ""):
        """Initialize with database path and details."""
        self.path = path
        message = f"Database unavailable at {path}"
        if details:
            message += f": {details}"
        super().__init__(message)


class QueryError(StorageError):
    """Raised when a statement fails to prepare or execute."""

    def __init__(self, message: str, sql: str | None = None):
        """Initialize with message and the failing statement."""
        self.sql = sql
        super().__init__(message)


class SchemaRevisionMismatchError(StorageError):
    """Raised when a table's recorded revision differs from the code's."""

    def __init__(self, table_name: str, expected: int, found: int):
        """Initialize with table name and both revisions."""
        self.table_name = table_name
        self.expected = expected
        self.found = found
        super().__init__(
            f"Revision mismatch for table {table_name}: "
            f"expected r{expected}, found r{found}"
        )


class RowDecodeError(StorageError, ValueError):
    """Raised when a row does not fit its record type."""

    def __init__(self, record_type: str, details: str):
        """Initialize with record type name and decoder message."""
        self.record_type = record_type
        super().__init__(f"Cannot decode {record_type} row: {details}")


class TransactionRequiredError(StorageError):
    """Raised when a write that must be atomic runs outside a transaction."""

    def __init__(self, operation: str):
        """Initialize with operation name."""
        self.operation = operation
        super().__init__(f"{operation} requires an open transaction")


class FolderImportError(StorageError):
    """Raised when a directory import is aborted and rolled back."""

    def __init__(self, root: str, details: str):
        """Initialize with import root and failure reason."""
        self.root = root
        super().__init__(f"Import of {root} failed: {details}")
