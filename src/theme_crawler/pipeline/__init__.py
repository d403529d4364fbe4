"""
Pipeline Framework Module

Core pipeline infrastructure of the theme crawler.

Components:
-----------
- PipelineManager: Runs stages in sequence with checkpoints
- PipelineStage: Abstract base class for per-entry stages
- ThemeEntry: Per-theme record mutated by the stages
- ThemeConfigLoader: Downloads and parses theme configs

Usage:
------
from theme_crawler.pipeline import PipelineStage, ThemeEntry

class MyCustomStage(PipelineStage):
    def process(self, entry: ThemeEntry) -> None:
        # Your processing logic
        ...
"""

from .base_pipeline import PipelineManager
from .stage import PipelineStage
from .pipeline_data import ThemeEntry, ErrorInfo
from .theme_config import ThemeConfigLoader, resolve_raw_url

__all__ = [
    'PipelineManager',
    'PipelineStage',
    'ThemeEntry',
    'ErrorInfo',
    'ThemeConfigLoader',
    'resolve_raw_url',
]
