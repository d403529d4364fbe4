"""
Repository Stage - Locates the default config file of each target theme.
"""

import logging
import threading
from dataclasses import dataclass

from ..stage import PipelineStage
from ..pipeline_data import ThemeEntry
from ..theme_config import ThemeConfigLoader
from ...extract.document_extractor import DocumentExtractor
from ...exceptions import ExtractionError, FetchError


@dataclass
class RepositoryConfig:
    """Configuration for the repository stage."""
    # When a repository has no config link: False records a no_config_link
    # error on the entry, True demotes the entry to a non-target instead.
    demote_on_missing_config: bool = False


class RepositoryStage(PipelineStage):
    """
    Stage 2: Repository Resolution.

    Responsibilities:
    - Fetch the repository page of each target
    - Extract the _config.yml / _config.json link
    - Fill config_filename, config_page_url and config_raw_url
    """

    def __init__(self, fetcher, extractor: DocumentExtractor, loader: ThemeConfigLoader,
                 config: RepositoryConfig, num_workers: int = 8):
        super().__init__("repository", num_workers)
        self.fetcher = fetcher
        self.extractor = extractor
        self.loader = loader
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

        self.stats = {'resolved': 0, 'no_config_link': 0, 'demoted': 0, 'fetch_failed': 0}
        self.repository_stats_lock = threading.Lock()

    def should_process(self, entry: ThemeEntry) -> bool:
        return entry.is_target and not entry.has_error

    def process(self, entry: ThemeEntry) -> None:
        try:
            html = self.fetcher.fetch(entry.repository_url)
        except FetchError as e:
            entry.record_error(self.name, e.kind, str(e))
            self._count('fetch_failed')
            self.logger.warning(f"WARNING: can not fetch repository of {entry.name}: {e}")
            return

        document = self.extractor.parse_document(html)
        link = self.extractor.extract_config_link(document, entry.repository_url)

        if link is None:
            if self.config.demote_on_missing_config:
                entry.is_target = False
                self._count('demoted')
                self.logger.warning(f"WARNING: no default config in {entry.repository_url}, "
                                    f"{entry.name} is no longer a target")
            else:
                entry.record_error(self.name, "no_config_link",
                                   f"No _config.yml or _config.json in {entry.repository_url}")
                self._count('no_config_link')
                self.logger.warning(f"WARNING: no default config in {entry.repository_url}")
            return

        try:
            raw_url = self.loader.resolve_raw_url(link.url)
        except ValueError as e:
            raise ExtractionError(
                f"Config link of {entry.name} is not a repository file URL: {link.url}"
            ) from e

        entry.config_filename = link.filename
        entry.config_page_url = link.url
        entry.config_raw_url = raw_url
        self._count('resolved')
        self.logger.debug(f"{entry.name}: {entry.config_filename} -> {entry.config_raw_url}")

    def _count(self, key: str):
        with self.repository_stats_lock:
            self.stats[key] += 1

    def get_stats(self) -> dict:
        base_stats = super().get_stats()
        with self.repository_stats_lock:
            base_stats['repository_stats'] = self.stats.copy()
        return base_stats
