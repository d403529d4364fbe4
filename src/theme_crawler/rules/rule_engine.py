"""
Rule Engine - Structural checks over parsed theme configs.

A theme config field is "overwritable" when a site-level default can be
merged over it safely. Only a non-empty mapping or list is not.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from ..pipeline.pipeline_data import ThemeEntry


class ValueShape(Enum):
    """Shape of a config value."""
    ABSENT = "absent"
    NULL = "null"
    EMPTY_COLLECTION = "empty_collection"
    NON_EMPTY_COLLECTION = "non_empty_collection"
    SCALAR = "scalar"


def classify(config: Any, field: str) -> ValueShape:
    if not isinstance(config, dict) or field not in config:
        return ValueShape.ABSENT

    value = config[field]
    if value is None:
        return ValueShape.NULL
    if isinstance(value, (dict, list, tuple, set)):
        return ValueShape.NON_EMPTY_COLLECTION if value else ValueShape.EMPTY_COLLECTION
    return ValueShape.SCALAR


def is_overwritable(config: Any, field: str) -> bool:
    return classify(config, field) is not ValueShape.NON_EMPTY_COLLECTION


@dataclass(frozen=True)
class Rule:
    label: str
    field: str

    def check(self, config: Any) -> bool:
        """True means compliant."""
        return is_overwritable(config, self.field)


RULES = (
    Rule(label="menu", field="menu"),
    Rule(label="nav", field="nav"),
    Rule(label="widgets", field="widgets"),
    Rule(label="links", field="links"),
)


@dataclass
class RuleResult:
    label: str
    violated_count: int
    checked_count: int

    @property
    def ratio(self) -> Optional[float]:
        """Violations as a percentage, None when nothing was checked."""
        if self.checked_count == 0:
            return None
        return self.violated_count * 100.0 / self.checked_count

    @property
    def ratio_text(self) -> str:
        ratio = self.ratio
        return "N/A" if ratio is None else f"{ratio:.1f}%"


class RuleEngine:
    """Evaluates the fixed rule set against every parsed config."""

    def __init__(self, rules: Sequence[Rule] = RULES):
        self.rules = tuple(rules)

    def evaluate(self, entries: Iterable[ThemeEntry]) -> List[RuleResult]:
        configs = [entry.config for entry in entries if entry.is_parsed]

        results = []
        for rule in self.rules:
            violated = sum(1 for config in configs if not rule.check(config))
            results.append(RuleResult(label=rule.label,
                                      violated_count=violated,
                                      checked_count=len(configs)))
        return results

    def violations_of(self, entry: ThemeEntry) -> List[str]:
        """Labels of the rules a single parsed entry fails."""
        if not entry.is_parsed:
            return []
        return [rule.label for rule in self.rules if not rule.check(entry.config)]


def format_table(results: Sequence[RuleResult]) -> str:
    """Render results as a fixed-width text table."""
    label_width = max([len("rule")] + [len(r.label) for r in results])
    header = f"{'rule':<{label_width}} | {'violated':>8} | {'checked':>7} | {'ratio':>6}"
    lines = [header, "-" * len(header)]
    for r in results:
        lines.append(f"{r.label:<{label_width}} | {r.violated_count:>8} | "
                     f"{r.checked_count:>7} | {r.ratio_text:>6}")
    return "\n".join(lines)
