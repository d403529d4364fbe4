"""
Crawler Configuration Management - Centralized configuration loading and validation.
Supports loading from YAML files with validation and defaults.
"""

import logging
import re
import yaml
from typing import Dict, Any
from pathlib import Path

from ..fetch.response_cache import CacheConfig
from ..fetch.rate_limiter import RateLimitConfig
from ..fetch.fetcher import FetchConfig
from ..extract.document_extractor import ExtractorConfig
from ..pipeline.stages.repository_stage import RepositoryConfig
from ..core.pipeline_crawler import CrawlerConfig, CatalogConfig


KNOWN_PARSERS = ('html.parser', 'lxml', 'html5lib')


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""
    pass


class ConfigLoader:
    """Loads crawler configuration from YAML files."""

    @staticmethod
    def load_from_yaml(config_path: str) -> CrawlerConfig:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            CrawlerConfig object

        Raises:
            ConfigurationError: If configuration is invalid
        """
        logger = logging.getLogger(__name__)

        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to read {config_path}: {e}")

        if not config_dict:
            raise ConfigurationError(f"Empty configuration file: {config_path}")
        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Configuration must be a mapping: {config_path}")

        logger.info(f"Loaded configuration from {config_path}")

        try:
            return ConfigLoader._parse_config(config_dict)
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigurationError(f"Failed to parse configuration: {e}")

    @staticmethod
    def _parse_config(config_dict: Dict[str, Any]) -> CrawlerConfig:
        """Parse configuration dictionary into CrawlerConfig object."""
        defaults = ConfigLoader.create_default_config()

        stages = config_dict.get('stages') or {}
        pipeline = config_dict.get('pipeline') or {}

        # Catalog
        catalog_cfg = stages.get('catalog') or {}
        catalog = CatalogConfig(
            catalog_url=catalog_cfg.get('catalog_url', defaults.catalog.catalog_url),
            supported_prefix=catalog_cfg.get('supported_prefix', defaults.catalog.supported_prefix)
        )

        # Response cache
        cache_cfg = stages.get('cache') or {}
        cache = CacheConfig(
            cache_path=str(cache_cfg.get('cache_path', defaults.cache.cache_path))
        )

        # HTTP fetch
        fetch_cfg = stages.get('fetch') or {}
        fetch = FetchConfig(
            timeout_seconds=fetch_cfg.get('timeout_seconds', 30),
            max_retries=fetch_cfg.get('max_retries', 2),
            max_redirects=fetch_cfg.get('max_redirects', 5),
            verify_ssl=fetch_cfg.get('verify_ssl', True),
            user_agent=fetch_cfg.get('user_agent', defaults.fetch.user_agent),
            accepted_content_type=fetch_cfg.get('accepted_content_type',
                                                defaults.fetch.accepted_content_type),
            accept_language=fetch_cfg.get('accept_language', 'en-US,en;q=0.9'),
            retry_backoff_factor=fetch_cfg.get('retry_backoff_factor', 1.0),
            retry_on_status=fetch_cfg.get('retry_on_status'),
            pool_connections=fetch_cfg.get('pool_connections', 2),
            pool_maxsize=fetch_cfg.get('pool_maxsize', 2)
        )

        # Rate limiting
        rate_cfg = stages.get('rate_limiting') or {}
        rate_limiting = RateLimitConfig(
            default_delay_seconds=rate_cfg.get('default_delay_seconds', 0.5),
            max_concurrent_requests=rate_cfg.get('max_concurrent_requests', 2)
        )

        # Markup extraction
        extract_cfg = stages.get('extract') or {}
        extract = ExtractorConfig(
            parser=extract_cfg.get('parser', 'html.parser'),
            catalog_item_selector=extract_cfg.get('catalog_item_selector',
                                                  defaults.extract.catalog_item_selector),
            catalog_name_selector=extract_cfg.get('catalog_name_selector',
                                                  defaults.extract.catalog_name_selector),
            file_list_selector=extract_cfg.get('file_list_selector',
                                               defaults.extract.file_list_selector),
            file_list_index=extract_cfg.get('file_list_index', defaults.extract.file_list_index),
            file_link_selector=extract_cfg.get('file_link_selector',
                                               defaults.extract.file_link_selector)
        )

        # Repository resolution
        repo_cfg = stages.get('repository') or {}
        repository = RepositoryConfig(
            demote_on_missing_config=bool(repo_cfg.get('demote_on_missing_config', False))
        )

        return CrawlerConfig(
            catalog=catalog,
            cache=cache,
            fetch=fetch,
            rate_limiting=rate_limiting,
            extract=extract,
            repository=repository,
            repository_workers=pipeline.get('repository_workers', defaults.repository_workers),
            download_workers=pipeline.get('download_workers', defaults.download_workers),
            parse_workers=pipeline.get('parse_workers', defaults.parse_workers)
        )

    @staticmethod
    def create_default_config() -> CrawlerConfig:
        """Create a default configuration."""
        return CrawlerConfig()


def validate_config(config: CrawlerConfig) -> bool:
    """Validate crawler configuration."""
    logger = logging.getLogger(__name__)

    if not config.catalog.catalog_url:
        raise ConfigurationError("catalog_url must not be empty")

    if not config.catalog.supported_prefix:
        raise ConfigurationError("supported_prefix must not be empty")

    if not config.cache.cache_path:
        raise ConfigurationError("cache_path must not be empty")

    for name in ('repository_workers', 'download_workers', 'parse_workers'):
        if getattr(config, name) < 1:
            raise ConfigurationError(f"{name} must be at least 1")

    if config.rate_limiting.max_concurrent_requests < 1:
        raise ConfigurationError("max_concurrent_requests must be at least 1")

    if config.rate_limiting.default_delay_seconds < 0:
        raise ConfigurationError("default_delay_seconds cannot be negative")

    if config.fetch.timeout_seconds <= 0:
        raise ConfigurationError("timeout_seconds must be positive")

    if config.fetch.max_retries < 0 or config.fetch.max_redirects < 0:
        raise ConfigurationError("max_retries and max_redirects cannot be negative")

    try:
        re.compile(config.fetch.accepted_content_type)
    except re.error as e:
        raise ConfigurationError(f"accepted_content_type is not a valid pattern: {e}")

    if config.extract.parser not in KNOWN_PARSERS:
        raise ConfigurationError(f"Unknown parser '{config.extract.parser}', "
                                 f"use one of {', '.join(KNOWN_PARSERS)}")

    if config.extract.file_list_index < 0:
        raise ConfigurationError("file_list_index cannot be negative")

    logger.debug("Configuration validated successfully")
    return True
