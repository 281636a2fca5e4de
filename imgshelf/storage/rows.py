"""Typed decoding of database rows into record structs."""

import sqlite3
from collections.abc import Iterable
from typing import Any, TypeVar

import msgspec

from .exceptions import RowDecodeError

T = TypeVar("T")


def row_to_dict(row: sqlite3.Row) -> dict[str, Any]:
    """Convert a row to a plain column -> value mapping."""
    return {key: row[key] for key in row.keys()}


def decode_row(row: sqlite3.Row, record_type: type[T]) -> T:
    """Decode one row into ``record_type``.

    Conversion is strict: a text value in an integer column is an error,
    never a silent default. Columns the record does not declare are ignored.

    Raises:
        RowDecodeError: If a column is missing or has the wrong type.
    """
    try:
        return msgspec.convert(row_to_dict(row), type=record_type, strict=True)
    except msgspec.ValidationError as e:
        raise RowDecodeError(record_type.__name__, str(e)) from e


def decode_rows(rows: Iterable[sqlite3.Row], record_type: type[T]) -> list[T]:
    """Decode every row, failing on the first bad one."""
    return [decode_row(row, record_type) for row in rows]


def encode_record(record: msgspec.Struct) -> dict[str, Any]:
    """Turn a record into named parameters for an INSERT."""
    return msgspec.to_builtins(record)
