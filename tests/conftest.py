"""Pytest configuration and fixtures."""

import os

import pytest

from imgshelf.core.models import (
    Category,
    CoverImage,
    Folder,
    FolderTag,
    GalleryMetadata,
)
from imgshelf.storage import FolderRepository, GalleryRepository, SQLiteBackend


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables for each test.

    Config and data homes point into the test's temporary directory so no
    test reads or writes the real user catalog.
    """
    original_env = os.environ.copy()
    monkeypatch.delenv("IMGSHELF_DB_PATH", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def backend():
    """In-memory catalog with every table created."""
    with SQLiteBackend() as db:
        yield db


@pytest.fixture
def folders(backend):
    return FolderRepository(backend)


@pytest.fixture
def galleries(backend):
    return GalleryRepository(backend)


def make_folder(fid: int, title: str, eh_gid: str = "") -> Folder:
    return Folder(
        fid=fid,
        folder_path=f"/library/{fid:03d}",
        title=title,
        record_time=1_600_000_000 + fid,
        eh_gid=eh_gid,
    )


def make_cover(fid: int) -> CoverImage:
    return CoverImage(fid=fid, cover_fname="001.jpg", cover_base64=f"thumb-{fid}")


def make_gallery(gid: str, title: str, title_jpn: str = "") -> GalleryMetadata:
    return GalleryMetadata(
        gid=gid,
        token="0439fa3666",
        title=title,
        title_jpn=title_jpn,
        category=Category.DOUJINSHI,
        thumb="https://example.test/thumb.jpg",
        uploader="uploader",
        posted=1_376_143_500,
        filecount=20,
        filesize=51_210_504,
        rating=4.5,
        meta_updated=1_700_000_000,
    )


@pytest.fixture
def populated(backend, folders, galleries):
    """A small catalog covering every keyword source.

    - fid 1: local tags, linked to gallery 618395 (tags + both titles)
    - fid 2: local tag only
    - fid 3: title only, no cover
    """
    folders.add(make_folder(1, "(C89) [Circle Name] My Title", eh_gid="618395"), make_cover(1))
    folders.add(make_folder(2, "[Other Circle] Another Story"), make_cover(2))
    folders.add(make_folder(3, "Unrelated"))

    folders.add_tag(FolderTag(fid=1, namespace="artist", stem="jane"))
    folders.add_tag(FolderTag(fid=1, namespace="language", stem="translated"))
    folders.add_tag(FolderTag(fid=2, namespace="artist", stem="john"))

    with backend.transaction():
        galleries.replace_gallery_metadata(
            make_gallery("618395", "My Title [English]", "私のタイトル"),
            ["female:glasses", "language:english"],
        )
    return backend


@pytest.fixture
def folder_factory():
    return make_folder


@pytest.fixture
def cover_factory():
    return make_cover


@pytest.fixture
def gallery_factory():
    return make_gallery
