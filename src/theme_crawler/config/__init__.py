"""
Configuration Module - Configuration management and loading.

This module handles loading and validating crawler configurations from
YAML files.

Components:
-----------
- ConfigLoader: Loads configurations from YAML files
- validate_config: Validates configuration objects
- ConfigurationError: Exception raised for invalid configurations

Usage:
------
from theme_crawler.config import ConfigLoader, validate_config

config = ConfigLoader.load_from_yaml('crawler.yaml')
validate_config(config)

Configuration File Format:
-------------------------
Every key is optional; missing keys keep their defaults.

pipeline:
  repository_workers: 8
  download_workers: 8
  parse_workers: 4

stages:
  catalog:
    catalog_url: https://hexo.io/themes/
    supported_prefix: https://github.com/
  cache:
    cache_path: cache.json
  fetch:
    timeout_seconds: 30
    max_retries: 2
  rate_limiting:
    default_delay_seconds: 0.5
    max_concurrent_requests: 2
  extract:
    parser: html.parser
  repository:
    demote_on_missing_config: false
"""

from .crawler_config import (
    ConfigLoader,
    validate_config,
    ConfigurationError
)

__all__ = [
    'ConfigLoader',
    'validate_config',
    'ConfigurationError',
]
