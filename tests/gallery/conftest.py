"""Fixtures for gallery API tests."""

import json
from typing import Any, Iterable

import pytest
import requests

GID = "618395"
TOKEN = "0439fa3666"


def gallery_item(**overrides: Any) -> dict[str, Any]:
    item = {
        "gid": int(GID),
        "token": TOKEN,
        "archiver_key": "436498--0a6b5e4b7e2f8c8e6a6f0f2e1d5e6d7a8b9c0d1e",
        "title": "(Kouroumu 8) [Handful Happiness! (Fuyuki Nanahara)] TOUHOU GUNMANIA A2",
        "title_jpn": "(紅楼夢8) [Handful☆Happiness! (七原冬雪)] TOUHOU GUNMANIA A2",
        "category": "Non-H",
        "thumb": "https://ehgt.org/14/63/1463dfbc16847c9ebef92c46a90e21ca881b2a12-1729712-4271-6032-jpg_l.jpg",
        "uploader": "avexotsukaai",
        "posted": "1376143500",
        "filecount": "20",
        "filesize": 51210504,
        "expunged": False,
        "rating": "4.43",
        "torrentcount": "0",
        "torrents": [],
        "tags": ["parody:touhou project", "group:handful happiness", "full color"],
    }
    item.update(overrides)
    return item


def make_response(status: int, body: Any = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = json.dumps(body).encode() if body is not None else b""
    response.url = "https://api.example.test/api.php"
    response.encoding = "utf-8"
    return response


class StubSession:
    """Session returning canned responses or raising canned errors in order."""

    def __init__(self, responses: Iterable[Any]):
        self._responses = list(responses)
        self.headers: dict[str, str] = {}
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, timeout: float = 0, **kwargs: Any):
        self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self._responses[min(len(self.calls), len(self._responses)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def item_factory():
    return gallery_item


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def stub_session():
    def factory(*responses):
        return StubSession(responses)

    return factory
