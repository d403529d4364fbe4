"""
Theme Config Loading - Downloads and parses a theme's default configuration.

The repository page links to the rendered file (github.com/.../blob/...);
the loader maps that link to its raw-content URL, fetches it, and parses it.
"""

import logging
from typing import Tuple
from urllib.parse import urlparse, urlunparse

import yaml

from .pipeline_data import ThemeEntry
from ..exceptions import FetchError, InvariantError, UnsupportedFormatError


RAW_CONTENT_HOST = "raw.githubusercontent.com"
BROWSER_HOSTS = ("github.com", "www.github.com")

YAML_EXTENSIONS = ('.yml', '.yaml')
JSON_EXTENSIONS = ('.json',)


def resolve_raw_url(page_url: str, raw_host: str = RAW_CONTENT_HOST,
                    browser_hosts: Tuple[str, ...] = BROWSER_HOSTS) -> str:
    """
    Map a repository browser URL to its raw-content URL.

    https://github.com/<owner>/<repo>/blob/<ref>/<path>
        -> https://raw.githubusercontent.com/<owner>/<repo>/<ref>/<path>

    Root-relative paths are treated as browser-host paths. A URL already on
    the raw host is returned unchanged.

    Raises:
        ValueError: If the URL is neither a browser file URL nor a raw URL
    """
    parsed = urlparse(page_url)
    host = parsed.netloc.lower()

    if host == raw_host:
        return page_url
    if host and host not in browser_hosts:
        raise ValueError(f"Not a repository browser URL: {page_url}")

    segments = parsed.path.lstrip('/').split('/')
    if len(segments) < 5 or segments[2] != 'blob' or not all(segments[:2]):
        raise ValueError(f"Not a repository file URL: {page_url}")

    path = '/' + '/'.join(segments[:2] + segments[3:])
    return urlunparse(('https', raw_host, path, '', parsed.query, ''))


class ThemeConfigLoader:
    """
    Loads and parses theme configuration files.

    Fetch and parse failures are recorded on the entry. A JSON config is
    not supported yet and aborts the run.
    """

    def __init__(self, fetcher):
        self.fetcher = fetcher
        self.logger = logging.getLogger(self.__class__.__name__)

    def resolve_raw_url(self, page_url: str) -> str:
        return resolve_raw_url(page_url)

    def load(self, entry: ThemeEntry, stage: str = "download") -> ThemeEntry:
        if not entry.config_page_url or entry.has_error:
            return entry

        raw_url = entry.config_raw_url or self.resolve_raw_url(entry.config_page_url)
        try:
            entry.config_text = self.fetcher.fetch(raw_url)
        except FetchError as e:
            entry.record_error(stage, e.kind, str(e))
            self.logger.warning(f"WARNING: can not download config of {entry.name}: {e}")
            return entry

        entry.config_raw_url = raw_url
        return entry

    def parse(self, entry: ThemeEntry, stage: str = "parse") -> ThemeEntry:
        if entry.config_text is None or entry.has_error:
            return entry

        filename = (entry.config_filename or "").lower()

        if filename.endswith(YAML_EXTENSIONS):
            self._parse_yaml(entry, stage)
        elif filename.endswith(JSON_EXTENSIONS):
            raise UnsupportedFormatError(
                f"JSON theme config is not implemented yet: {entry.config_raw_url}"
            )
        else:
            raise InvariantError(
                f"Unexpected config filename {entry.config_filename!r} for {entry.name}"
            )

        return entry

    def _parse_yaml(self, entry: ThemeEntry, stage: str):
        try:
            document = yaml.safe_load(entry.config_text)
        except yaml.YAMLError as e:
            self.logger.debug(f"YAML error in {entry.config_raw_url}: {e}")
            self.logger.warning(f"WARNING: can not parse YAML file: {entry.config_raw_url}")
            entry.record_error(stage, "parse_error", f"Invalid YAML: {e}")
            return

        if document is None:
            document = {}

        if not isinstance(document, dict):
            self.logger.warning(f"WARNING: YAML top level is not a mapping: {entry.config_raw_url}")
            entry.record_error(stage, "parse_error",
                               f"Top level is {type(document).__name__}, expected mapping")
            return

        entry.config = document
