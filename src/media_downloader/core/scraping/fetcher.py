"""HTTP fetcher with timeout, optional retries and a browser-like User-Agent.

Provides a small `Fetcher` object exposing `get`, `stream_get` and `head`.
"""

from __future__ import annotations

from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class Fetcher:
    """Small HTTP client shared by the page fetch and the downloads.

    Usage:
        f = Fetcher(timeout=30)
        resp = f.get(url)

    Retries are off by default: a failed resource is dropped from the run.
    """

    def __init__(
        self,
        timeout: Optional[float] = 30.0,
        retries: int = 0,
        backoff_factor: float = 0.3,
        user_agent: Optional[str] = None,
    ) -> None:
        self.timeout = timeout
        self.session = requests.Session()
        retry = Retry(
            total=retries,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET", "HEAD"]),
            backoff_factor=backoff_factor,
            raise_on_status=False,
        )
        # pool sized for wide fan-out; extra connections are simply discarded
        adapter = HTTPAdapter(max_retries=retry, pool_maxsize=64)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)
        self.user_agent = user_agent or DEFAULT_USER_AGENT

    def _headers(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        base = {"User-Agent": self.user_agent}
        if headers:
            base.update(headers)
        return base

    def get(self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs):
        return self.session.get(
            url, headers=self._headers(headers), timeout=self.timeout, **kwargs
        )

    def stream_get(self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs):
        # Streamed GET for writing bodies straight to disk
        return self.session.get(
            url,
            headers=self._headers(headers),
            timeout=self.timeout,
            stream=True,
            **kwargs,
        )

    def head(self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs):
        kwargs.setdefault("allow_redirects", True)
        return self.session.head(
            url, headers=self._headers(headers), timeout=self.timeout, **kwargs
        )

    def get_text(self, url: str) -> str:
        """GET `url` and return its decoded body, raising on HTTP errors.

        Without a charset in Content-Type the body is read as UTF-8, not the
        ISO-8859-1 that requests assumes for text/* responses.
        """
        resp = self.get(url)
        resp.raise_for_status()
        if "charset=" not in (resp.headers.get("Content-Type") or "").lower():
            resp.encoding = "utf-8"
        return resp.text

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
