"""
Theme Entry Model - Per-theme record that flows through the pipeline
File: src/theme_crawler/pipeline/pipeline_data.py
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class ErrorInfo:
    """First failure recorded on an entry."""
    stage: str
    kind: str
    message: str

    def __str__(self) -> str:
        return f"[{self.stage}] {self.kind}: {self.message}"


@dataclass
class ThemeEntry:
    """
    Accumulated crawl state of one catalog theme.
    Created at discovery; each stage fills in the fields it owns.
    """
    # Discovery - required
    name: str
    repository_url: str
    is_target: bool = False

    # Repository page
    config_filename: Optional[str] = None
    config_page_url: Optional[str] = None
    config_raw_url: Optional[str] = None

    # Download and parse
    config_text: Optional[str] = None
    config: Optional[Any] = None

    # Error tracking - first failure wins, never cleared
    error: Optional[ErrorInfo] = None

    # Timing
    stage_timings: Dict[str, float] = field(default_factory=dict)

    def record_error(self, stage: str, kind: str, message: str) -> bool:
        """
        Record a failure unless one is already recorded.

        Returns:
            True if this call set the error
        """
        if self.error is not None:
            return False
        self.error = ErrorInfo(stage=stage, kind=kind, message=message)
        return True

    def add_timing(self, stage: str, duration: float) -> None:
        """Record processing time for a stage"""
        self.stage_timings[stage] = duration

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def is_parsed(self) -> bool:
        return self.config is not None

    @property
    def is_skipped(self) -> bool:
        return not self.is_target and self.error is None

    @property
    def outcome(self) -> str:
        """Terminal outcome for reporting; parsed takes precedence."""
        if self.is_parsed:
            return "parsed"
        if self.error is not None:
            return "error"
        if not self.is_target:
            return "skipped"
        return "pending"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization"""
        return {
            'name': self.name,
            'repository_url': self.repository_url,
            'is_target': self.is_target,
            'config_filename': self.config_filename,
            'config_page_url': self.config_page_url,
            'config_raw_url': self.config_raw_url,
            'config_text_length': len(self.config_text) if self.config_text else 0,
            'outcome': self.outcome,
            'error': str(self.error) if self.error else None,
            'stage_timings': self.stage_timings,
        }

    def __repr__(self) -> str:
        return f"ThemeEntry(name='{self.name}', target={self.is_target}, outcome={self.outcome})"
