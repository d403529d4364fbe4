"""
Config Parsing Stage - Parses downloaded theme configs into documents.
"""

import logging

from ..stage import PipelineStage
from ..pipeline_data import ThemeEntry
from ..theme_config import ThemeConfigLoader


class ParseStage(PipelineStage):
    """
    Stage 4: Config Parsing.

    YAML errors are recorded on the entry. A JSON config raises
    UnsupportedFormatError, which ends the run after the stage drains.
    """

    def __init__(self, loader: ThemeConfigLoader, num_workers: int = 4):
        super().__init__("parse", num_workers)
        self.loader = loader
        self.logger = logging.getLogger(self.__class__.__name__)

    def should_process(self, entry: ThemeEntry) -> bool:
        return entry.config_text is not None and not entry.has_error

    def process(self, entry: ThemeEntry) -> None:
        self.loader.parse(entry, stage=self.name)
