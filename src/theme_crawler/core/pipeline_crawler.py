"""
Theme Crawler - Main orchestrator that connects all pipeline stages.
This is the high-level interface for running a crawl.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from ..fetch.response_cache import ResponseCache, CacheConfig
from ..fetch.rate_limiter import RateLimitConfig
from ..fetch.fetcher import HTTPFetcher, FetchConfig, SessionManager
from ..extract.document_extractor import DocumentExtractor, ExtractorConfig
from ..pipeline.base_pipeline import PipelineManager
from ..pipeline.pipeline_data import ThemeEntry
from ..pipeline.theme_config import ThemeConfigLoader
from ..pipeline.stages.catalog_stage import CatalogStage, select_targets
from ..pipeline.stages.repository_stage import RepositoryStage, RepositoryConfig
from ..pipeline.stages.download_stage import DownloadStage
from ..pipeline.stages.parse_stage import ParseStage
from ..rules.rule_engine import RuleEngine
from .report import CrawlReport


@dataclass
class CatalogConfig:
    """Where the crawl starts and which repositories it follows."""
    catalog_url: str = "https://hexo.io/themes/"
    supported_prefix: str = "https://github.com/"


@dataclass
class CrawlerConfig:
    """Master configuration for the entire crawler pipeline."""
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    rate_limiting: RateLimitConfig = field(default_factory=RateLimitConfig)
    extract: ExtractorConfig = field(default_factory=ExtractorConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)

    # Worker counts per stage
    repository_workers: int = 8
    download_workers: int = 8
    parse_workers: int = 4


class ThemeCrawler:
    """
    Main crawler orchestrator.

    Lifecycle of one run:
    construct -> cache.load -> catalog -> [stage, checkpoint]* -> cache.save
    """

    def __init__(self, config: CrawlerConfig, cache: Optional[ResponseCache] = None,
                 session_manager: Optional[SessionManager] = None):
        """
        Initialize theme crawler.

        Args:
            config: Complete crawler configuration
            cache: Response cache (created from config.cache if omitted)
            session_manager: HTTP session source (tests inject a fake one)
        """
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

        self.cache = cache or ResponseCache(config.cache)
        self.fetcher = HTTPFetcher(config.fetch, self.cache,
                                   rate_limit=config.rate_limiting,
                                   session_manager=session_manager)
        self.extractor = DocumentExtractor(config.extract)
        self.loader = ThemeConfigLoader(self.fetcher)
        self.rule_engine = RuleEngine()

        self.entries: List[ThemeEntry] = []
        self.manager: Optional[PipelineManager] = None
        self.start_time = None

    def _build_pipeline(self) -> PipelineManager:
        manager = PipelineManager(checkpoint=self._checkpoint)
        manager.build_pipeline([
            RepositoryStage(self.fetcher, self.extractor, self.loader,
                            self.config.repository,
                            num_workers=self.config.repository_workers),
            DownloadStage(self.loader, num_workers=self.config.download_workers),
            ParseStage(self.loader, num_workers=self.config.parse_workers),
        ])
        return manager

    def _checkpoint(self, stage_name: str):
        self.logger.debug(f"Checkpoint after stage '{stage_name}'")
        self.cache.save()

    def run(self, limit: int = 1) -> CrawlReport:
        """
        Crawl the catalog and deep-crawl up to `limit` targets.

        Returns:
            CrawlReport with stage counts and rule statistics
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")

        self.start_time = time.time()
        self.cache.load()

        try:
            catalog = CatalogStage(self.fetcher, self.extractor, self.config.catalog.catalog_url)
            self.entries = catalog.run()
            self._checkpoint(catalog.name)

            selected = select_targets(self.entries, limit, self.config.catalog.supported_prefix)
            self.logger.info(f"{len(selected)} themes are selected as targets (limit {limit})")

            self.manager = self._build_pipeline()
            self.entries = self.manager.run(self.entries)

            self.logger.info(f"{sum(1 for e in self.entries if e.is_target)} themes are found in GitHub")
            self.cache.save()
        finally:
            self.fetcher.close()

        report = CrawlReport.from_entries(self.entries, self.rule_engine)
        elapsed = time.time() - self.start_time
        self.logger.info(f"Crawl completed in {elapsed:.2f}s: {report.parsed} configs parsed, "
                         f"{report.errors} failures")
        self.logger.debug(f"Fetch stats: {self.fetcher.get_stats()}")
        return report

    def get_detailed_stats(self) -> dict:
        """
        Get detailed statistics from all stages.

        Returns:
            dict with detailed stats per stage
        """
        stats = {
            'crawler': {
                'runtime': time.time() - self.start_time if self.start_time else 0,
                'entries': len(self.entries),
            },
            'fetch': self.fetcher.get_stats(),
            'stages': {}
        }

        if self.manager is not None:
            for stage_stats in self.manager.get_stage_stats():
                stats['stages'][stage_stats['name']] = stage_stats

        return stats
