"""
Exception hierarchy for the theme crawler.

CrawlerError and its subclasses are runtime failures. Fetch errors are
either recorded on a single entry or escalated, depending on the stage.
InvariantError marks a broken programming contract and is always fatal.
"""

from typing import Optional


class CrawlerError(Exception):
    """Base class for runtime failures of a crawl."""
    pass


class InvariantError(AssertionError):
    """Raised when a caller breaks a component contract."""
    pass


class FetchError(CrawlerError):
    """A URL could not be turned into response text."""

    kind = "fetch_error"

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{message}: {url}")
        self.url = url
        self.status_code = status_code


class NotFoundError(FetchError):
    """HTTP 404. Expected and recoverable."""

    kind = "not_found"


class TransportError(FetchError):
    """DNS, connection, TLS or timeout failure."""

    kind = "transport"


class UnexpectedStatusError(FetchError):
    """Any non-200 status other than 404 and followed redirects."""

    kind = "unexpected_status"


class UnexpectedContentTypeError(FetchError):
    """A 200 response whose content type is outside the accepted set."""

    kind = "unexpected_content_type"


class CatalogError(CrawlerError):
    """The catalog page could not be fetched."""
    pass


class ExtractionError(CrawlerError):
    """Fetched markup violates its extraction contract."""
    pass


class CacheCorruptError(CrawlerError):
    """The persisted cache file cannot be read back."""
    pass


class UnsupportedFormatError(CrawlerError):
    """A theme configuration format this version cannot parse."""
    pass


class CacheWriteError(CrawlerError):
    """The cache file cannot be written."""
    pass
