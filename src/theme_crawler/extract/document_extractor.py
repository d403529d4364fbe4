"""
Document Extraction - Pulls catalog entries and config-file links out of HTML.

Two page kinds are understood:
- the theme catalog page (one list item per theme)
- a repository browser page (the file list of the repository root)
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, List
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, FeatureNotFound

from ..exceptions import ExtractionError


CONFIG_FILENAME_RE = re.compile(r"^_config\.(yml|json)$")


@dataclass
class ExtractorConfig:
    """Configuration for markup extraction."""
    parser: str = "html.parser"  # 'html.parser', 'lxml', or 'html5lib'

    # Catalog page
    catalog_item_selector: str = "#plugin-list > li"
    catalog_name_selector: str = "a.plugin-name"

    # Repository page
    file_list_selector: str = ".Box .Details"
    file_list_index: int = 1  # The second block holds the root file list
    file_link_selector: str = "a.Link--primary"


@dataclass(frozen=True)
class CatalogItem:
    """One theme as listed in the catalog."""
    name: str
    repository_url: str


@dataclass(frozen=True)
class ConfigLink:
    """The default config file of a repository."""
    filename: str
    url: str


def absolute_url(href: str, base_url: str) -> Optional[str]:
    """
    Convert a possibly relative href to an absolute http(s) URL.

    Returns:
        Absolute URL or None if the result has no scheme/host
    """
    href = (href or "").strip()
    if not href:
        return None

    resolved = urljoin(base_url, href)
    parsed = urlparse(resolved)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return None
    return resolved


class DocumentExtractor:
    """Parses HTML with BeautifulSoup and applies the page contracts."""

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()
        self.logger = logging.getLogger(self.__class__.__name__)
        self._verify_parser()

    def _verify_parser(self):
        """Verify the configured parser is available."""
        try:
            BeautifulSoup("<html></html>", self.config.parser)
        except FeatureNotFound:
            self.logger.warning(f"Parser '{self.config.parser}' not available, "
                                f"falling back to 'html.parser'")
            self.config.parser = "html.parser"

    def parse_document(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, self.config.parser)

    def extract_catalog(self, document: BeautifulSoup, base_url: str) -> List[CatalogItem]:
        """
        Extract catalog entries in page order.

        Raises:
            ExtractionError: If the list is missing or empty, or an item does
                not carry exactly one usable name anchor
        """
        items = document.select(self.config.catalog_item_selector)
        if not items:
            raise ExtractionError(
                f"Catalog has no entries matching '{self.config.catalog_item_selector}': {base_url}"
            )

        entries = []
        for index, item in enumerate(items):
            anchors = item.select(self.config.catalog_name_selector)
            if len(anchors) != 1:
                raise ExtractionError(
                    f"Catalog item #{index} has {len(anchors)} name anchors, expected 1"
                )

            anchor = anchors[0]
            name = anchor.get_text(strip=True)
            if not name:
                raise ExtractionError(f"Catalog item #{index} has an empty name")

            repository_url = absolute_url(anchor.get('href', ''), base_url)
            if not repository_url:
                raise ExtractionError(
                    f"Catalog item '{name}' has no absolute repository URL: {anchor.get('href')!r}"
                )

            self.logger.debug(f"{name} {repository_url}")
            entries.append(CatalogItem(name=name, repository_url=repository_url))

        return entries

    def extract_config_link(self, document: BeautifulSoup, base_url: str) -> Optional[ConfigLink]:
        """
        Find the _config.yml / _config.json link of a repository page.

        Returns:
            ConfigLink, or None if the page lists no such file

        Raises:
            ExtractionError: If more than one qualifying link is present
        """
        blocks = document.select(self.config.file_list_selector)
        if len(blocks) <= self.config.file_list_index:
            self.logger.debug(f"No file list block on {base_url}")
            return None

        block = blocks[self.config.file_list_index]
        found = None
        for anchor in block.select(self.config.file_link_selector):
            filename = anchor.get_text(strip=True)
            if not CONFIG_FILENAME_RE.match(filename):
                continue
            if found is not None:
                raise ExtractionError(
                    f"Ambiguous config files on {base_url}: {found.filename}, {filename}"
                )

            url = absolute_url(anchor.get('href', ''), base_url)
            if not url:
                raise ExtractionError(f"Config link '{filename}' has no usable href on {base_url}")
            found = ConfigLink(filename=filename, url=url)

        return found
