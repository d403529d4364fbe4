"""
Download Stage - Fetches the raw text of each resolved config file.
"""

import logging

from ..stage import PipelineStage
from ..pipeline_data import ThemeEntry
from ..theme_config import ThemeConfigLoader


class DownloadStage(PipelineStage):
    """Stage 3: Config Download. Failures stay on the entry."""

    def __init__(self, loader: ThemeConfigLoader, num_workers: int = 8):
        super().__init__("download", num_workers)
        self.loader = loader
        self.logger = logging.getLogger(self.__class__.__name__)

    def should_process(self, entry: ThemeEntry) -> bool:
        return bool(entry.config_page_url) and not entry.has_error

    def process(self, entry: ThemeEntry) -> None:
        self.loader.load(entry, stage=self.name)
