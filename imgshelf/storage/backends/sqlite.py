"""SQLite storage backend for the folder catalog."""

import logging
import sqlite3
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from ..exceptions import (
    QueryError,
    SchemaRevisionMismatchError,
    StoreUnavailableError,
)
from ..rows import decode_row
from ..schema import REVISIONS, TABLES, TableSchema

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class SQLiteBackend:
    """Single shared SQLite connection with schema checks and transactions.

    The connection runs in autocommit mode; every write goes through
    :meth:`transaction` or :meth:`run_in_transaction`, which hold a
    re-entrant lock so writes are never interleaved.
    """

    def __init__(self, db_path: Path | str = MEMORY, initialize: bool = True):
        self.db_path = str(db_path)
        self._lock = threading.RLock()
        self.conn: sqlite3.Connection | None = self._open()
        if initialize:
            self.initialize()

    def _open(self) -> sqlite3.Connection:
        try:
            if self.db_path != MEMORY:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                self.db_path, check_same_thread=False, isolation_level=None
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Failed to open database {self.db_path}: {e}")
            raise StoreUnavailableError(self.db_path, str(e)) from e
        return conn

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the connection, ensuring it exists."""
        if self.conn is None:
            raise StoreUnavailableError(self.db_path, "connection is closed")
        return self.conn

    @property
    def in_transaction(self) -> bool:
        return self.connection.in_transaction

    def initialize(self) -> None:
        """Create missing tables and verify recorded revisions.

        Raises:
            SchemaRevisionMismatchError: If a table exists at another revision.
        """
        with self.transaction():
            self.execute(REVISIONS.create_sql)
            for table in TABLES:
                self._ensure_table(table)

    def _ensure_table(self, table: TableSchema) -> None:
        row = self.query_one(
            "SELECT * FROM table_revision WHERE table_name = ?", (table.name,)
        )
        if row is None:
            self.execute(table.create_sql)
            self.execute(
                "INSERT INTO table_revision(table_name, revision) VALUES(?, ?)",
                (table.name, table.revision),
            )
            logger.info(f"Created table {table.name}")
            return

        recorded = decode_row(row, REVISIONS.record)
        if recorded.revision != table.revision:
            logger.error(f"Revision mismatch for table {table.name}")
            raise SchemaRevisionMismatchError(table.name, table.revision, recorded.revision)

    def execute(self, sql: str, params: Sequence[Any] | dict[str, Any] = ()) -> sqlite3.Cursor:
        """Execute one statement."""
        try:
            return self.connection.execute(sql, params)
        except sqlite3.Error as e:
            logger.error(f"Statement failed: {e}")
            raise QueryError(str(e), sql) from e

    def query(self, sql: str, params: Sequence[Any] | dict[str, Any] = ()) -> list[sqlite3.Row]:
        """Run a SELECT and fetch every row."""
        try:
            return self.connection.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Query failed: {e}")
            raise QueryError(str(e), sql) from e

    def query_one(
        self, sql: str, params: Sequence[Any] | dict[str, Any] = ()
    ) -> sqlite3.Row | None:
        rows = self.query(sql, params)
        return rows[0] if rows else None

    def query_scalar(self, sql: str, params: Sequence[Any] | dict[str, Any] = ()) -> Any:
        """Return the first column of the first row, or None."""
        row = self.query_one(sql, params)
        return row[0] if row is not None else None

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Transaction context manager.

        Nested use joins the outer transaction; only the outermost block
        commits or rolls back.
        """
        with self._lock:
            in_transaction = self.connection.in_transaction

            if not in_transaction:
                self.execute("BEGIN")

            try:
                yield
            except Exception:
                if not in_transaction:
                    self.connection.rollback()
                raise

            if in_transaction:
                return
            try:
                self.connection.commit()
            except sqlite3.Error as e:
                self.connection.rollback()
                logger.error(f"Commit failed: {e}")
                raise QueryError(str(e), "COMMIT") from e

    def run_in_transaction(self, fn: Callable[["SQLiteBackend"], bool]) -> str | None:
        """Run ``fn`` atomically.

        ``fn`` receives this backend and returns True to commit or False to
        roll back. An intentional rollback is not an error.

        Returns:
            None on commit or intentional rollback, otherwise a message
            describing why the transaction failed (it was rolled back).
        """
        with self._lock:
            try:
                self.connection.execute("BEGIN")
            except (sqlite3.Error, StoreUnavailableError) as e:
                logger.error(f"Failed to start transaction: {e}")
                return "failed to start transaction"

            try:
                need_commit = fn(self)
            except Exception as e:
                self.connection.rollback()
                logger.error(f"Transaction function raised, rolled back: {e}")
                return f"exception raised when executing transaction function: {e}"

            if not need_commit:
                self.connection.rollback()
                return None

            try:
                self.connection.commit()
            except sqlite3.Error as e:
                self.connection.rollback()
                logger.error(f"Commit failed: {e}")
                return "database transaction commit failed"
            return None

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self) -> "SQLiteBackend":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
