"""
HTTP Fetcher - Turns a URL into response text.

Cache first; otherwise one GET through a bounded number of network slots.
Redirects are followed by hand so that the final body is cached under every
URL of the chain, and outcomes are normalized into the FetchError family.
"""

import logging
import re
import threading
from typing import Optional, Dict, List, Tuple
from dataclasses import dataclass
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from requests.exceptions import RequestException

from .rate_limiter import RateLimitConfig, RequestSlots, FixedDelayLimiter, extract_domain
from .response_cache import ResponseCache
from ..exceptions import (
    NotFoundError, TransportError, UnexpectedStatusError, UnexpectedContentTypeError
)


REDIRECT_STATUSES = (301, 302, 303, 307, 308)


@dataclass
class FetchConfig:
    """Configuration for the HTTP fetcher."""
    timeout_seconds: int = 30
    max_retries: int = 2
    max_redirects: int = 5
    verify_ssl: bool = True
    user_agent: str = "HexoThemeCrawler/1.0"

    # Accepted Content-Type header values (regex, case-insensitive)
    accepted_content_type: str = r"^text/(html|plain); charset=utf-8$"

    # Request headers
    accept_language: str = "en-US,en;q=0.9"

    # Retry settings
    retry_backoff_factor: float = 1.0
    retry_on_status: list = None

    # Connection pooling
    pool_connections: int = 2
    pool_maxsize: int = 2

    def __post_init__(self):
        """Set default retry status codes."""
        if self.retry_on_status is None:
            self.retry_on_status = [429, 500, 502, 503, 504]


class SessionManager:
    """Hands out one requests.Session per thread."""

    def __init__(self, config: FetchConfig):
        self.config = config
        self.sessions: Dict[int, requests.Session] = {}
        self.lock = threading.Lock()
        self.logger = logging.getLogger(self.__class__.__name__)

    def get_session(self) -> requests.Session:
        thread_id = threading.get_ident()
        with self.lock:
            if thread_id not in self.sessions:
                self.sessions[thread_id] = self._create_session()
            return self.sessions[thread_id]

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=self.config.retry_backoff_factor,
            status_forcelist=self.config.retry_on_status,
            allowed_methods=["GET", "HEAD"],
            redirect=False,
            raise_on_redirect=False,
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retry_strategy,
                              pool_connections=self.config.pool_connections,
                              pool_maxsize=self.config.pool_maxsize)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({
            'User-Agent': self.config.user_agent,
            'Accept': 'text/html,text/plain;q=0.9,*/*;q=0.8',
            'Accept-Language': self.config.accept_language,
        })
        return session

    def close_all(self):
        with self.lock:
            for session in self.sessions.values():
                session.close()
            self.sessions.clear()


class HTTPFetcher:
    """
    Cache-first fetcher shared by every stage of a run.

    fetch() returns the response text or raises one of NotFoundError,
    TransportError, UnexpectedStatusError, UnexpectedContentTypeError.
    """

    def __init__(self, config: FetchConfig, cache: ResponseCache,
                 rate_limit: Optional[RateLimitConfig] = None,
                 session_manager: Optional[SessionManager] = None):
        self.config = config
        self.cache = cache
        self.rate_limit = rate_limit or RateLimitConfig()
        self.session_manager = session_manager or SessionManager(config)
        self.slots = RequestSlots(self.rate_limit.max_concurrent_requests)
        self.delay_limiter = FixedDelayLimiter(self.rate_limit.default_delay_seconds)
        self._content_type_re = re.compile(config.accepted_content_type, re.IGNORECASE)
        self.logger = logging.getLogger(self.__class__.__name__)

        self.stats = {
            'requests': 0, 'cache_hits': 0, 'redirects': 0,
            'not_found': 0, 'failures': 0, 'bytes': 0,
        }
        self.stats_lock = threading.Lock()

    def fetch(self, url: str) -> str:
        return self._fetch(url, [])

    def _fetch(self, url: str, chain: List[str]) -> str:
        cached = self.cache.query(url)
        if cached:
            self._count('cache_hits')
            self.logger.debug(f"Cache hit: {url}")
            return cached

        text, location = self._request(url)
        if location is None:
            return text

        # The slot of the redirecting request is released at this point
        if len(chain) >= self.config.max_redirects:
            self._count('failures')
            raise UnexpectedStatusError(url, f"More than {self.config.max_redirects} redirects")
        if location == url or location in chain:
            self._count('failures')
            raise UnexpectedStatusError(url, f"Redirect loop via {location}")

        self.logger.info(f"Redirected: {url} -> {location}")
        text = self._fetch(location, chain + [url])
        if text:
            self.cache.store(url, text)
        return text

    def _request(self, url: str) -> Tuple[str, Optional[str]]:
        """
        Issue one GET holding a network slot.

        The per-host delay is served before the slot is taken, so a
        sleeping request never occupies a slot.

        Returns:
            (body, None) on success, ("", absolute target) on a redirect
        """
        session = self.session_manager.get_session()
        self.delay_limiter.wait_if_needed(extract_domain(url))

        with self.slots.acquire():
            self._count('requests')
            self.logger.debug(f"Fetching: {url}")

            try:
                with session.get(url, timeout=self.config.timeout_seconds,
                                 allow_redirects=False, verify=self.config.verify_ssl,
                                 stream=True) as response:
                    return self._handle_response(url, response)
            except RequestException as e:
                self._count('failures')
                self.logger.warning(f"Failed to fetch {url}: {e}")
                raise TransportError(url, f"Request error ({e.__class__.__name__}: {e})") from e

    def _handle_response(self, url: str, response) -> Tuple[str, Optional[str]]:
        status = response.status_code

        if status in REDIRECT_STATUSES:
            location = response.headers.get('Location')
            if not location:
                self._count('failures')
                raise UnexpectedStatusError(url, f"HTTP {status} without Location", status)
            self._count('redirects')
            return "", urljoin(url, location)

        if status == 404:
            self._count('not_found')
            raise NotFoundError(url, "HTTP 404", status)

        if status != 200:
            self._count('failures')
            raise UnexpectedStatusError(url, f"HTTP {status}", status)

        content_type = response.headers.get('Content-Type', '')
        if not self._content_type_re.match(content_type):
            self._count('failures')
            raise UnexpectedContentTypeError(url, f"Content-Type {content_type!r}", status)

        try:
            text = response.content.decode('utf-8')
        except UnicodeDecodeError as e:
            self._count('failures')
            raise UnexpectedContentTypeError(url, f"Body is not valid UTF-8 ({e.reason})", status) from e

        with self.stats_lock:
            self.stats['bytes'] += len(text)

        self.logger.info(f"Fetched: {url} ({len(text)} chars)")
        if text:
            self.cache.store(url, text)
        else:
            self.logger.warning(f"Empty body, not cached: {url}")
        return text, None

    def _count(self, key: str):
        with self.stats_lock:
            self.stats[key] += 1

    def get_stats(self) -> dict:
        with self.stats_lock:
            stats = self.stats.copy()
        stats['slots'] = self.slots.get_stats()
        stats['hosts'] = self.delay_limiter.get_stats()['domains']
        return stats

    def close(self):
        self.session_manager.close_all()
