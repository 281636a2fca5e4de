"""Pytest configuration and fixtures for CLI tests.

Every invocation runs against a catalog file in the test's temporary
directory, passed with ``--db``.
"""

from concurrent.futures import Future
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from imgshelf.core.models import FolderTag, GalleryMetadata
from imgshelf.gallery import GalleryClient, GalleryInfo
from imgshelf.storage import FolderRepository, GalleryRepository, SQLiteBackend


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "catalog.db"


@pytest.fixture
def cli_runner(db_path):
    """Click CLI test runner bound to the temporary catalog."""

    class ImgShelfCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            from imgshelf.cli.main import cli

            if isinstance(args, list) and "--db" not in args:
                args = ["--db", str(db_path), *args]
            return super().invoke(cli, args, **kwargs)

    return ImgShelfCliRunner()


@pytest.fixture
def catalog(db_path, folder_factory, cover_factory, gallery_factory):
    """Catalog file holding two folders, the first linked to a gallery."""
    with SQLiteBackend(db_path) as backend:
        folders = FolderRepository(backend)
        folders.add(
            folder_factory(1, "(C89) [Circle Name] My Title", eh_gid="618395"), cover_factory(1)
        )
        folders.add(folder_factory(2, "[Other Circle] Another Story"), cover_factory(2))
        folders.add_tag(FolderTag(fid=1, namespace="artist", stem="jane"))
        folders.add_tag(FolderTag(fid=2, namespace="artist", stem="john"))
        with backend.transaction():
            GalleryRepository(backend).replace_gallery_metadata(
                gallery_factory("618395", "My Title [English]"), ["language:english"]
            )
    return db_path


@pytest.fixture
def fetched_info():
    return GalleryInfo(
        metadata=GalleryMetadata(gid="618395", token="newtoken", title="Fetched Title"),
        tags=["artist:fetched", "full color"],
    )


@pytest.fixture
def mock_client(monkeypatch, fetched_info):
    """Replace the API client used by the gallery commands.

    The instance hands back a completed future holding ``fetched_info``;
    tests may swap ``fetch_metadata_async.return_value``.
    """
    client = MagicMock(spec=GalleryClient)
    client.__enter__.return_value = client
    future: Future = Future()
    future.set_result(fetched_info)
    client.fetch_metadata_async.return_value = future

    factory = MagicMock(return_value=client)
    monkeypatch.setattr("imgshelf.cli.commands.gallery.GalleryClient", factory)
    return client
