import json

import pytest

from conftest import FakeSessionManager, html, not_found, plain
from theme_crawler.core.pipeline_crawler import CrawlerConfig, ThemeCrawler
from theme_crawler.exceptions import CacheWriteError, CatalogError, ExtractionError, UnsupportedFormatError


CATALOG = "https://hexo.io/themes/"
ALPHA = "https://github.com/a/hexo-theme-alpha"
BETA = "https://github.com/b/hexo-theme-beta"
GAMMA = "https://gitlab.com/c/hexo-theme-gamma"
ALPHA_RAW = "https://raw.githubusercontent.com/a/hexo-theme-alpha/master/_config.yml"

ALPHA_CONFIG = """\
menu:
  Home: /
  Archives: /archives
widgets: []
nav:
"""


def catalog_page(items) -> str:
    rows = "".join(
        f'<li><a class="plugin-name" href="{url}">{name}</a></li>' for name, url in items
    )
    return f'<html><body><ul id="plugin-list">{rows}</ul></body></html>'


def repository_page(path: str, filename: str) -> str:
    return (
        '<div class="Box"><div class="Details">commit</div><div class="Details">'
        f'<a class="Link--primary" href="{path}/blob/master/LICENSE">LICENSE</a>'
        f'<a class="Link--primary" href="{path}/blob/master/{filename}">{filename}</a>'
        '</div></div>'
    )


def routes():
    return {
        CATALOG: html(catalog_page([("Gamma", GAMMA), ("Beta", BETA), ("Alpha", ALPHA)])),
        ALPHA: html(repository_page("/a/hexo-theme-alpha", "_config.yml")),
        ALPHA_RAW: plain(ALPHA_CONFIG),
        BETA: not_found(),
    }


def test_end_to_end_run(crawler_config: CrawlerConfig, tmp_path) -> None:
    sessions = FakeSessionManager(routes())
    crawler = ThemeCrawler(crawler_config, session_manager=sessions)

    report = crawler.run(limit=2)

    assert [entry.name for entry in crawler.entries] == ["Alpha", "Beta", "Gamma"]
    assert (report.discovered, report.targeted, report.resolved) == (3, 2, 1)
    assert (report.downloaded, report.parsed, report.errors) == (1, 1, 1)

    alpha, beta, gamma = crawler.entries
    assert alpha.config == {"menu": {"Home": "/", "Archives": "/archives"}, "widgets": [], "nav": None}
    assert beta.error.kind == "not_found"
    assert beta.error.stage == "repository"
    assert gamma.outcome == "skipped"

    results = {r.label: r for r in report.rule_results}
    assert results["menu"].violated_count == 1
    assert results["widgets"].violated_count == 0
    assert results["menu"].checked_count == 1

    saved = json.loads((tmp_path / "cache.json").read_text(encoding="utf-8"))
    assert set(saved) == {CATALOG, ALPHA, ALPHA_RAW}


def test_second_run_is_served_from_cache(crawler_config: CrawlerConfig) -> None:
    ThemeCrawler(crawler_config, session_manager=FakeSessionManager(routes())).run(limit=2)

    sessions = FakeSessionManager({BETA: not_found()})
    report = ThemeCrawler(crawler_config, session_manager=sessions).run(limit=2)

    assert sessions.calls == [BETA]
    assert report.parsed == 1


def test_limit_one_only_follows_first_github_theme(crawler_config: CrawlerConfig) -> None:
    sessions = FakeSessionManager(routes())

    report = ThemeCrawler(crawler_config, session_manager=sessions).run(limit=1)

    assert report.targeted == 1
    assert report.errors == 0
    assert BETA not in sessions.calls


def test_missing_config_link_demotes_when_configured(crawler_config: CrawlerConfig) -> None:
    crawler_config.repository.demote_on_missing_config = True
    pages = routes()
    pages[ALPHA] = html('<div class="Box"><div class="Details"></div><div class="Details"></div></div>')

    crawler = ThemeCrawler(crawler_config, session_manager=FakeSessionManager(pages))
    report = crawler.run(limit=1)

    assert report.targeted == 0
    assert report.errors == 0
    assert crawler.entries[0].outcome == "skipped"


def test_json_config_aborts_run_after_checkpoint(crawler_config: CrawlerConfig, tmp_path) -> None:
    pages = routes()
    pages[ALPHA] = html(repository_page("/a/hexo-theme-alpha", "_config.json"))
    pages["https://raw.githubusercontent.com/a/hexo-theme-alpha/master/_config.json"] = plain("{}")

    with pytest.raises(UnsupportedFormatError):
        ThemeCrawler(crawler_config, session_manager=FakeSessionManager(pages)).run(limit=1)

    saved = json.loads((tmp_path / "cache.json").read_text(encoding="utf-8"))
    assert "https://raw.githubusercontent.com/a/hexo-theme-alpha/master/_config.json" in saved


def test_unreachable_catalog_is_fatal(crawler_config: CrawlerConfig) -> None:
    with pytest.raises(CatalogError):
        ThemeCrawler(crawler_config, session_manager=FakeSessionManager({CATALOG: not_found()})).run()


def test_duplicate_catalog_names_are_fatal(crawler_config: CrawlerConfig) -> None:
    pages = {CATALOG: html(catalog_page([("Alpha", ALPHA), ("Alpha", BETA)]))}

    with pytest.raises(ExtractionError):
        ThemeCrawler(crawler_config, session_manager=FakeSessionManager(pages)).run()


def test_invalid_limit(crawler_config: CrawlerConfig) -> None:
    with pytest.raises(ValueError):
        ThemeCrawler(crawler_config, session_manager=FakeSessionManager({})).run(limit=0)


def test_summary_mentions_counts(crawler_config: CrawlerConfig) -> None:
    report = ThemeCrawler(crawler_config, session_manager=FakeSessionManager(routes())).run(limit=2)

    summary = report.format_summary()

    assert "3 themes are found in catalog" in summary
    assert "1 themes are processing for analysis" in summary
    assert "Beta" in summary


def test_config_link_outside_github_is_fatal(crawler_config: CrawlerConfig) -> None:
    pages = routes()
    pages[ALPHA] = html(
        '<div class="Box"><div class="Details"></div><div class="Details">'
        '<a class="Link--primary" href="https://gitlab.com/a/x/-/blob/main/_config.yml">_config.yml</a>'
        '</div></div>'
    )

    with pytest.raises(ExtractionError):
        ThemeCrawler(crawler_config, session_manager=FakeSessionManager(pages)).run(limit=1)


def test_unwritable_cache_is_fatal(crawler_config: CrawlerConfig, tmp_path) -> None:
    (tmp_path / "blocker").write_text("", encoding="utf-8")
    crawler_config.cache.cache_path = str(tmp_path / "blocker" / "cache.json")

    with pytest.raises(CacheWriteError):
        ThemeCrawler(crawler_config, session_manager=FakeSessionManager(routes())).run(limit=1)


def test_report_and_stats_cover_every_entry(crawler_config: CrawlerConfig) -> None:
    crawler = ThemeCrawler(crawler_config, session_manager=FakeSessionManager(routes()))

    report = crawler.run(limit=2)
    stats = crawler.get_detailed_stats()

    assert report.skipped == 1
    assert "1 themes are skipped" in report.format_summary()
    assert stats['crawler']['entries'] == 3
    assert stats['fetch']['requests'] == 4
    assert set(stats['stages']) == {"repository", "download", "parse"}
    assert stats['stages']['parse']['processed'] == 1

    alpha, beta, gamma = (entry.to_dict() for entry in crawler.entries)
    assert alpha['outcome'] == "parsed"
    assert alpha['config_raw_url'] == ALPHA_RAW
    assert alpha['config_text_length'] == len(ALPHA_CONFIG)
    assert "repository" in alpha['stage_timings']
    assert beta['error'] == str(crawler.entries[1].error)
    assert beta['error'].startswith("[repository] not_found:")
    assert gamma == {**gamma, 'is_target': False, 'outcome': 'skipped', 'error': None}
