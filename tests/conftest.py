"""Shared fixtures: a scripted stand-in for requests sessions.

Routes map a URL to a FakeResponse, or to an exception instance that is
raised when the URL is requested. Unknown URLs fail the test loudly.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Union

import pytest

from theme_crawler.core.pipeline_crawler import CrawlerConfig
from theme_crawler.fetch.rate_limiter import RateLimitConfig
from theme_crawler.fetch.response_cache import CacheConfig


HTML = "text/html; charset=utf-8"
PLAIN = "text/plain; charset=utf-8"


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", content_type: str = HTML,
                 headers: Dict[str, str] | None = None) -> None:
        self.status_code = status_code
        self.content = text.encode("utf-8")
        self.headers = {"Content-Type": content_type}
        self.headers.update(headers or {})
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def html(body: str) -> FakeResponse:
    return FakeResponse(200, body, HTML)


def plain(body: str) -> FakeResponse:
    return FakeResponse(200, body, PLAIN)


def redirect(location: str, status: int = 301) -> FakeResponse:
    return FakeResponse(status, "", HTML, headers={"Location": location})


def not_found() -> FakeResponse:
    return FakeResponse(404, "Not Found", HTML)


Route = Union[FakeResponse, BaseException]


class FakeSession:
    def __init__(self, routes: Dict[str, Route]) -> None:
        self.routes = dict(routes)
        self.calls: List[str] = []
        self.lock = threading.Lock()

    def get(self, url: str, **kwargs) -> FakeResponse:
        with self.lock:
            self.calls.append(url)
        if url not in self.routes:
            raise AssertionError(f"unexpected request: {url}")
        route = self.routes[url]
        if isinstance(route, BaseException):
            raise route
        return route

    def close(self) -> None:
        pass


class FakeSessionManager:
    def __init__(self, routes: Dict[str, Route]) -> None:
        self.session = FakeSession(routes)

    def get_session(self) -> FakeSession:
        return self.session

    def close_all(self) -> None:
        pass

    @property
    def calls(self) -> List[str]:
        return self.session.calls


@pytest.fixture
def crawler_config(tmp_path) -> CrawlerConfig:
    config = CrawlerConfig()
    config.cache = CacheConfig(cache_path=str(tmp_path / "cache.json"))
    config.rate_limiting = RateLimitConfig(default_delay_seconds=0.0, max_concurrent_requests=2)
    return config
