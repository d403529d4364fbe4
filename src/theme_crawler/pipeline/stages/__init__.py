"""
Pipeline Stages Module

Pipeline Flow:
--------------
1. CatalogStage     - Fetches the catalog, builds sorted unique entries
                      (followed by select_targets)
2. RepositoryStage  - Finds each target's default config link
3. DownloadStage    - Downloads the raw config text
4. ParseStage       - Parses the config into a document

Stages 2-4 are PipelineStage subclasses and run as barriers: each one
finishes every entry before the next one starts.
"""

# Stage 1: Catalog
from .catalog_stage import CatalogStage, build_entries, select_targets

# Stage 2: Repository
from .repository_stage import RepositoryStage, RepositoryConfig

# Stage 3: Download
from .download_stage import DownloadStage

# Stage 4: Parse
from .parse_stage import ParseStage


__all__ = [
    'CatalogStage',
    'build_entries',
    'select_targets',
    'RepositoryStage',
    'RepositoryConfig',
    'DownloadStage',
    'ParseStage',
]
