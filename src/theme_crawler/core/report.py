"""
Crawl Report - Per-stage counts and rule statistics of one run.
"""

from dataclasses import dataclass, field
from typing import List

from ..pipeline.pipeline_data import ThemeEntry
from ..rules.rule_engine import RuleEngine, RuleResult, format_table


@dataclass
class CrawlReport:
    discovered: int
    targeted: int
    resolved: int
    downloaded: int
    parsed: int
    errors: int
    skipped: int = 0
    rule_results: List[RuleResult] = field(default_factory=list)
    failed_entries: List[ThemeEntry] = field(default_factory=list)

    @classmethod
    def from_entries(cls, entries: List[ThemeEntry], engine: RuleEngine) -> "CrawlReport":
        failed = [e for e in entries if e.outcome == "error"]
        return cls(
            discovered=len(entries),
            targeted=sum(1 for e in entries if e.is_target),
            resolved=sum(1 for e in entries if e.config_page_url),
            downloaded=sum(1 for e in entries if e.config_text is not None),
            parsed=sum(1 for e in entries if e.is_parsed),
            errors=len(failed),
            skipped=sum(1 for e in entries if e.is_skipped),
            rule_results=engine.evaluate(entries),
            failed_entries=failed,
        )

    def format_summary(self) -> str:
        lines = [
            "=" * 60,
            "CRAWL SUMMARY",
            "=" * 60,
            f"{self.discovered} themes are found in catalog",
            f"{self.targeted} themes are targeted",
            f"{self.resolved} themes have a default config",
            f"{self.downloaded} configs are downloaded",
            f"{self.parsed} themes are processing for analysis",
            f"{self.errors} themes failed",
            f"{self.skipped} themes are skipped",
        ]

        if self.failed_entries:
            lines.append("")
            lines.append("Failures:")
            for entry in self.failed_entries:
                lines.append(f"  {entry.name:25} | {entry.error}")

        lines.append("")
        lines.append("Rules (violated = field is a non-empty collection):")
        lines.append("-" * 60)
        lines.append(format_table(self.rule_results))
        lines.append("=" * 60)
        return "\n".join(lines)

    def print_summary(self) -> None:
        print("\n" + self.format_summary() + "\n")
