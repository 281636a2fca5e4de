"""Tests for typed row decoding and the schema registry."""

import sqlite3

import pytest

from imgshelf.core.models import Category, Folder, GalleryMetadata, TableRevision
from imgshelf.storage import RowDecodeError, decode_row, decode_rows, get_table
from imgshelf.storage.rows import encode_record


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    connection.row_factory = sqlite3.Row
    yield connection
    connection.close()


class TestDecodeRow:
    """Test strict conversion of rows into records."""

    def test_decodes_matching_row(self, conn):
        row = conn.execute(
            "SELECT 1 AS fid, '/a' AS folder_path, 'A' AS title, 5 AS record_time, '' AS eh_gid"
        ).fetchone()
        assert decode_row(row, Folder) == Folder(
            fid=1, folder_path="/a", title="A", record_time=5
        )

    def test_text_in_integer_column_is_rejected(self, conn):
        """Type mismatches raise instead of defaulting."""
        row = conn.execute(
            "SELECT 'one' AS fid, '/a' AS folder_path, 'A' AS title, 5 AS record_time"
        ).fetchone()
        with pytest.raises(RowDecodeError) as excinfo:
            decode_row(row, Folder)
        assert excinfo.value.record_type == "Folder"

    def test_null_in_required_column_is_rejected(self, conn):
        row = conn.execute(
            "SELECT 1 AS fid, NULL AS folder_path, 'A' AS title, 5 AS record_time"
        ).fetchone()
        with pytest.raises(RowDecodeError):
            decode_row(row, Folder)

    def test_missing_column_is_rejected(self, conn):
        row = conn.execute("SELECT 'img_folders' AS table_name").fetchone()
        with pytest.raises(RowDecodeError):
            decode_row(row, TableRevision)

    def test_extra_columns_are_ignored(self, conn):
        row = conn.execute("SELECT 'x' AS table_name, 1 AS revision, 2 AS other").fetchone()
        assert decode_row(row, TableRevision) == TableRevision(table_name="x", revision=1)

    def test_category_decoded_from_display_name(self, conn):
        row = conn.execute(
            "SELECT '1' AS gid, 't' AS token, 'T' AS title, 'Cosplay' AS category"
        ).fetchone()
        assert decode_row(row, GalleryMetadata).category is Category.COSPLAY

    def test_decode_rows_fails_on_first_bad_row(self, conn):
        rows = conn.execute(
            "SELECT 'a' AS table_name, 1 AS revision "
            "UNION ALL SELECT 'b', 'two'"
        ).fetchall()
        with pytest.raises(RowDecodeError):
            decode_rows(rows, TableRevision)


class TestEncodeRecord:
    def test_named_parameters(self):
        record = GalleryMetadata(gid="1", token="t", title="T", category=Category.MANGA)
        params = encode_record(record)
        assert params["gid"] == "1"
        assert params["category"] == "Manga"


class TestSchemaRegistry:
    def test_lookup(self):
        table = get_table("img_folders")
        assert table.record is Folder
        assert table.revision == 1

    def test_revision_table_is_registered(self):
        assert get_table("table_revision").record is TableRevision

    def test_unknown_table(self):
        with pytest.raises(KeyError):
            get_table("nope")
