"""Tests for refreshing a folder's gallery metadata."""

from concurrent.futures import Future
from unittest.mock import Mock

import pytest

from imgshelf.core.models import GalleryMetadata
from imgshelf.gallery import GalleryClient, GalleryInfo, MetadataRefresher, RefreshError, UpstreamError

GID = "618395"


def completed(value=None, error=None) -> Future:
    future: Future = Future()
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(value)
    return future


@pytest.fixture
def fetched():
    return GalleryInfo(
        metadata=GalleryMetadata(gid=GID, token="newtoken", title="Fresh Title", meta_updated=1),
        tags=["artist:new"],
    )


@pytest.fixture
def client(fetched):
    mock = Mock(spec=GalleryClient)
    mock.fetch_metadata_async.return_value = completed(fetched)
    return mock


class TestResolve:
    """Test gallery id and token resolution."""

    def test_stored_token(self, populated, client):
        refresher = MetadataRefresher(populated, client)
        assert refresher.resolve(1) == (GID, "0439fa3666")

    def test_explicit_token_wins(self, populated, client):
        assert MetadataRefresher(populated, client).resolve(1, "given") == (GID, "given")

    def test_unknown_folder(self, populated, client):
        with pytest.raises(RefreshError, match="no such folder"):
            MetadataRefresher(populated, client).resolve(99)

    def test_unlinked_folder(self, populated, client):
        with pytest.raises(RefreshError, match="not linked"):
            MetadataRefresher(populated, client).resolve(2)

    def test_linked_without_stored_record(self, populated, folders, client):
        folders.link_gallery(2, "777")
        with pytest.raises(RefreshError, match="no token known"):
            MetadataRefresher(populated, client).resolve(2)


class TestRefresh:
    """Test the fetch-then-write refresh path."""

    def test_replaces_record_and_tags(self, populated, galleries, client, fetched):
        info = MetadataRefresher(populated, client).refresh(1)

        assert info == fetched
        client.fetch_metadata_async.assert_called_once_with(GID, "0439fa3666")
        assert galleries.find(GID).title == "Fresh Title"
        assert galleries.tags(GID) == ["artist:new"]

    def test_refreshed_keywords_are_searchable(self, populated, client):
        from imgshelf.search import SearchService

        MetadataRefresher(populated, client).refresh(1)
        service = SearchService(populated)
        assert service.search(["artist:new"]).fids == [1]
        assert service.search(["female:glasses"]).fids == []

    def test_first_fetch_with_explicit_token(self, populated, folders, galleries, client, fetched):
        folders.link_gallery(2, GID)
        MetadataRefresher(populated, client).refresh(2, token="newtoken")
        client.fetch_metadata_async.assert_called_once_with(GID, "newtoken")

    def test_fetch_failure_never_writes(self, populated, galleries, client):
        client.fetch_metadata_async.return_value = completed(error=UpstreamError("down"))

        with pytest.raises(RefreshError, match="down"):
            MetadataRefresher(populated, client).refresh(1)

        assert galleries.find(GID).title == "My Title [English]"
        assert galleries.tags(GID) == ["female:glasses", "language:english"]

    def test_cancelled_fetch_never_writes(self, populated, galleries, client):
        future: Future = Future()
        future.cancel()
        client.fetch_metadata_async.return_value = future

        with pytest.raises(RefreshError, match="cancelled"):
            MetadataRefresher(populated, client).refresh(1)

        assert galleries.tags(GID) == ["female:glasses", "language:english"]

    def test_timed_out_fetch(self, populated, client):
        client.fetch_metadata_async.return_value = Future()

        with pytest.raises(RefreshError, match="timed out"):
            MetadataRefresher(populated, client, timeout=0.01).refresh(1)

    def test_failed_write_is_rolled_back(self, populated, galleries, client, monkeypatch):
        def failing_replace_tags(self, gid, tags):
            raise RuntimeError("constraint failed")

        from imgshelf.storage.repository import GalleryRepository

        monkeypatch.setattr(GalleryRepository, "replace_tags", failing_replace_tags)

        with pytest.raises(RefreshError, match="constraint failed"):
            MetadataRefresher(populated, client).refresh(1)

        monkeypatch.undo()
        assert galleries.find(GID).title == "My Title [English]"
