"""
Theme Crawler - A pipeline-based crawler that audits Hexo theme configs.

Features:
- Crawls the theme catalog and follows themes to their GitHub repositories
- Downloads and parses each theme's default _config.yml
- Cache-first, rate-limited HTTP fetching with a persistent JSON cache
- Concurrent per-theme stages with checkpoints between stages
- Reports how many themes ship non-mergeable menu/nav/widgets/links defaults
"""

__version__ = "1.0.0"

from .core.pipeline_crawler import ThemeCrawler, CrawlerConfig
from .config.crawler_config import ConfigLoader, validate_config
from .pipeline.pipeline_data import ThemeEntry

__all__ = [
    'ThemeCrawler',
    'CrawlerConfig',
    'ConfigLoader',
    'validate_config',
    'ThemeEntry',
]
