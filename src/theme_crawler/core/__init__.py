"""
Core Module - High-level crawler orchestration.

Components:
-----------
- ThemeCrawler: Builds the stages and runs one crawl
- CrawlerConfig: Complete configuration for all components
- CrawlReport: Counts and rule statistics of a finished run

Usage:
------
from theme_crawler.core import ThemeCrawler
from theme_crawler.config import ConfigLoader

config = ConfigLoader.create_default_config()
crawler = ThemeCrawler(config)
report = crawler.run(limit=5)
report.print_summary()
"""

from .pipeline_crawler import ThemeCrawler, CrawlerConfig, CatalogConfig
from .report import CrawlReport

__all__ = [
    'ThemeCrawler',
    'CrawlerConfig',
    'CatalogConfig',
    'CrawlReport',
]
