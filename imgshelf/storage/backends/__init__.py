"""Storage backends.

- **SQLiteBackend**: embedded database holding the whole catalog, with
  schema revision checks and atomic transactions
"""

from .sqlite import MEMORY, SQLiteBackend

__all__ = [
    "MEMORY",
    "SQLiteBackend",
]
