import pytest

from theme_crawler.pipeline.pipeline_data import ThemeEntry
from theme_crawler.rules.rule_engine import (
    RuleEngine,
    RuleResult,
    ValueShape,
    classify,
    format_table,
    is_overwritable,
)


def _parsed(name: str, config) -> ThemeEntry:
    entry = ThemeEntry(name=name, repository_url=f"https://github.com/o/{name}", is_target=True)
    entry.config = config
    return entry


@pytest.mark.parametrize("config, shape", [
    ({}, ValueShape.ABSENT),
    ({"menu": None}, ValueShape.NULL),
    ({"menu": {}}, ValueShape.EMPTY_COLLECTION),
    ({"menu": []}, ValueShape.EMPTY_COLLECTION),
    ({"menu": {"Home": "/"}}, ValueShape.NON_EMPTY_COLLECTION),
    ({"menu": ["home"]}, ValueShape.NON_EMPTY_COLLECTION),
    ({"menu": "Home"}, ValueShape.SCALAR),
    ({"menu": 0}, ValueShape.SCALAR),
    ({"menu": False}, ValueShape.SCALAR),
])
def test_classify(config, shape) -> None:
    assert classify(config, "menu") is shape


def test_only_non_empty_collections_are_not_overwritable() -> None:
    assert is_overwritable({"menu": {}}, "menu")
    assert is_overwritable({"menu": ""}, "menu")
    assert is_overwritable({}, "menu")
    assert not is_overwritable({"widgets": {"a": 1}}, "widgets")


def test_evaluate_counts_violations_over_parsed_entries() -> None:
    pending = ThemeEntry(name="pending", repository_url="https://github.com/o/pending", is_target=True)
    entries = [
        _parsed("a", {"menu": {}, "widgets": {"a": 1}}),
        _parsed("b", {"menu": {"Home": "/"}, "widgets": ["recent_posts"], "links": None}),
        pending,
    ]

    results = {r.label: r for r in RuleEngine().evaluate(entries)}

    assert list(results) == ["menu", "nav", "widgets", "links"]
    assert results["menu"].violated_count == 1
    assert results["widgets"].violated_count == 2
    assert results["nav"].violated_count == 0
    assert all(r.checked_count == 2 for r in results.values())
    assert results["menu"].ratio == pytest.approx(50.0)
    assert results["widgets"].ratio_text == "100.0%"


def test_violations_of_single_entry() -> None:
    engine = RuleEngine()

    assert engine.violations_of(_parsed("a", {"nav": {"x": 1}, "links": [1]})) == ["nav", "links"]
    assert engine.violations_of(ThemeEntry(name="x", repository_url="https://github.com/o/x")) == []


def test_ratio_without_checked_entries() -> None:
    result = RuleResult(label="menu", violated_count=0, checked_count=0)

    assert result.ratio is None
    assert result.ratio_text == "N/A"


def test_evaluate_with_nothing_parsed() -> None:
    results = RuleEngine().evaluate([])

    assert [r.ratio_text for r in results] == ["N/A"] * 4


def test_format_table() -> None:
    table = format_table([
        RuleResult("menu", 1, 3),
        RuleResult("widgets", 0, 0),
    ])
    lines = table.splitlines()

    assert lines[0].split(" | ")[0].strip() == "rule"
    assert set(lines[1]) == {"-"}
    assert lines[2].startswith("menu")
    assert lines[2].endswith("33.3%")
    assert lines[3].endswith("N/A")
