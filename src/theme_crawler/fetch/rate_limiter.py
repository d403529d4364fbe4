"""
Rate Limiting - Keeps request pressure on the origin hosts low.

Two independent controls:
- RequestSlots bounds the number of requests in flight.
- FixedDelayLimiter enforces a minimum delay between requests to one host.
"""

import threading
import logging
import time
from contextlib import contextmanager
from typing import Optional, Dict
from dataclasses import dataclass
from urllib.parse import urlparse


@dataclass
class RateLimitConfig:
    """Configuration for request rate limiting."""
    default_delay_seconds: float = 0.5  # Delay between requests to one host
    max_concurrent_requests: int = 2  # Network slots shared by all hosts


class RequestSlots:
    """
    Bounded set of network slots.

    A slot is held for one request/response exchange only. Callers that
    follow a redirect must release their slot first, so a nested fetch
    can always acquire its own.
    """

    def __init__(self, max_concurrent: int = 2):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.max_concurrent = max_concurrent
        self._semaphore = threading.BoundedSemaphore(max_concurrent)
        self._in_flight = 0
        self._peak = 0
        self.lock = threading.Lock()

    @contextmanager
    def acquire(self):
        self._semaphore.acquire()
        with self.lock:
            self._in_flight += 1
            self._peak = max(self._peak, self._in_flight)
        try:
            yield
        finally:
            with self.lock:
                self._in_flight -= 1
            self._semaphore.release()

    def get_stats(self) -> dict:
        with self.lock:
            return {
                'max_concurrent': self.max_concurrent,
                'in_flight': self._in_flight,
                'peak_in_flight': self._peak,
            }


class FixedDelayLimiter:
    """
    Simple fixed delay rate limiter.

    Enforces minimum time between requests to the same host. Each caller
    reserves its start time under the lock and sleeps outside it, so one
    host's delay never holds up another host.
    """

    def __init__(self, default_delay: float = 0.5):
        self.default_delay = default_delay
        self.last_request_time: Dict[str, float] = {}
        self.lock = threading.Lock()
        self.logger = logging.getLogger(self.__class__.__name__)

    def wait_if_needed(self, domain: str, delay: Optional[float] = None) -> float:
        """
        Wait if necessary before allowing request.

        Args:
            domain: Host to rate limit
            delay: Optional override of the default delay

        Returns:
            Seconds slept
        """
        delay = delay if delay is not None else self.default_delay
        if delay <= 0:
            return 0.0

        with self.lock:
            current_time = time.time()
            start_time = current_time
            if domain in self.last_request_time:
                start_time = max(current_time, self.last_request_time[domain] + delay)
            self.last_request_time[domain] = start_time

        sleep_time = start_time - current_time
        if sleep_time > 0:
            self.logger.debug(f"Rate limiting {domain}: sleeping {sleep_time:.2f}s")
            time.sleep(sleep_time)
        return sleep_time

    def get_stats(self) -> dict:
        """Get limiter statistics."""
        with self.lock:
            return {
                'tracked_domains': len(self.last_request_time),
                'domains': list(self.last_request_time.keys())
            }


def extract_domain(url: str) -> str:
    """Lower-cased host of a URL, without port."""
    domain = urlparse(url).netloc.lower()
    if ':' in domain:
        domain = domain.split(':')[0]
    return domain
