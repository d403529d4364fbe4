"""
Catalog Discovery - Seeds the pipeline from the theme catalog page.

Every failure here is fatal: without a catalog there is nothing to crawl.
"""

import logging
from collections import Counter
from typing import List

from ..pipeline_data import ThemeEntry
from ...extract.document_extractor import DocumentExtractor, CatalogItem
from ...exceptions import CatalogError, ExtractionError, FetchError


def build_entries(items: List[CatalogItem]) -> List[ThemeEntry]:
    """
    Turn extracted catalog items into entries sorted by name.

    Raises:
        ExtractionError: If a theme name appears more than once
    """
    counts = Counter(item.name for item in items)
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    if duplicates:
        raise ExtractionError(f"Duplicate theme names in catalog: {', '.join(duplicates)}")

    entries = [ThemeEntry(name=item.name, repository_url=item.repository_url) for item in items]
    entries.sort(key=lambda entry: entry.name)
    return entries


def select_targets(entries: List[ThemeEntry], limit: int, supported_prefix: str) -> List[ThemeEntry]:
    """
    Mark the first `limit` entries hosted under `supported_prefix` as targets.

    Returns:
        The selected entries, in catalog order
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    eligible = [entry for entry in entries if entry.repository_url.startswith(supported_prefix)]
    selected = eligible[:limit]
    for entry in selected:
        entry.is_target = True
    return selected


class CatalogStage:
    """Fetches the catalog page and builds the sorted entry list."""

    name = "catalog"

    def __init__(self, fetcher, extractor: DocumentExtractor, catalog_url: str):
        self.fetcher = fetcher
        self.extractor = extractor
        self.catalog_url = catalog_url
        self.logger = logging.getLogger(self.__class__.__name__)

    def run(self) -> List[ThemeEntry]:
        try:
            html = self.fetcher.fetch(self.catalog_url)
        except FetchError as e:
            raise CatalogError(f"Catalog page unreachable: {e}") from e

        document = self.extractor.parse_document(html)
        items = self.extractor.extract_catalog(document, self.catalog_url)
        entries = build_entries(items)

        self.logger.info(f"{len(entries)} themes are found in catalog")
        return entries
