"""Shared fakes: a Fetcher that serves canned responses instead of the network."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple, Union

import pytest
import requests

Served = Union[Tuple[Union[bytes, str], Optional[str]], Exception]


class DummyResponse:
    def __init__(self, url: str, body: bytes, content_type: Optional[str] = None, status_code: int = 200):
        self.url = url
        self.content = body
        self.status_code = status_code
        self.headers = {"Content-Type": content_type} if content_type else {}

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class DummyFetcher:
    """Serves `routes[url]` = (body, content_type) or an exception to raise.

    Unknown URLs answer 404. Every call is recorded as (method, url).
    """

    def __init__(self, routes: Optional[Dict[str, Served]] = None, timeout=None):
        self.routes: Dict[str, Served] = dict(routes or {})
        self.timeout = timeout
        self.calls: List[Tuple[str, str]] = []
        self.closed = 0
        self._lock = threading.Lock()

    def _respond(self, method: str, url: str) -> DummyResponse:
        with self._lock:
            self.calls.append((method, url))
        served = self.routes.get(url)
        if served is None:
            return DummyResponse(url, b"", status_code=404)
        if isinstance(served, Exception):
            raise served
        body, content_type = served
        if isinstance(body, str):
            body = body.encode("utf-8")
        return DummyResponse(url, body, content_type)

    def get(self, url, headers=None, **kwargs):
        return self._respond("GET", url)

    def stream_get(self, url, headers=None, **kwargs):
        return self._respond("GET", url)

    def head(self, url, headers=None, **kwargs):
        resp = self._respond("HEAD", url)
        resp.content = b""
        return resp

    def get_text(self, url):
        resp = self.get(url)
        resp.raise_for_status()
        return resp.text

    def close(self):
        self.closed += 1

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def methods_for(self, url: str) -> List[str]:
        return [m for m, u in self.calls if u == url]


@pytest.fixture
def make_fetcher():
    return DummyFetcher


@pytest.fixture(scope="session")
def prefect_harness():
    from prefect.testing.utilities import prefect_test_harness

    with prefect_test_harness():
        yield


def _list_files(root) -> List[str]:
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


@pytest.fixture
def list_files():
    """Relative posix paths of every file under a root, sorted."""
    return _list_files
