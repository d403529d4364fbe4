"""
Extraction Module - HTML contracts of the catalog and repository pages.
"""

from .document_extractor import (
    DocumentExtractor,
    ExtractorConfig,
    CatalogItem,
    ConfigLink,
)

__all__ = [
    'DocumentExtractor',
    'ExtractorConfig',
    'CatalogItem',
    'ConfigLink',
]
