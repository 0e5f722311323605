"""
Checks against the deployed site at $BASE_URL.

Skipped unless SITECHECK_LIVE=1, since they need network access.
"""
from __future__ import annotations

import os

import pytest

from sitecheck.config import CheckConfig
from sitecheck.core import Fetcher, crawl_links
from sitecheck.pages import DEFAULT_PAGES, SEED_PATHS, check_page
from sitecheck.sources import BrowserHtmlSource, browser_session

pytestmark = [
    pytest.mark.live,
    pytest.mark.skipif(os.environ.get("SITECHECK_LIVE") != "1", reason="set SITECHECK_LIVE=1 to run"),
]


@pytest.fixture(scope="module")
def config():
    return CheckConfig.from_env()


@pytest.fixture(scope="module")
def live_fetcher(config):
    fetcher = Fetcher(config.base_url, timeout_s=config.timeout_s, user_agent=config.user_agent)
    yield fetcher
    fetcher.close()


@pytest.mark.parametrize("expectation", DEFAULT_PAGES, ids=lambda e: e.path)
def test_page_renders_expected_elements(expectation, live_fetcher) -> None:
    report = check_page(expectation, live_fetcher)
    assert report.ok, "\n".join(report.problems)


def test_every_internal_link_returns_200(live_fetcher, config) -> None:
    verdict = crawl_links(SEED_PATHS, live_fetcher, max_workers=config.max_workers)
    assert verdict.discovered
    assert verdict.ok, verdict.report()


def test_homepage_links_from_rendered_dom(live_fetcher, config) -> None:
    with browser_session(config) as page:
        verdict = crawl_links(["/"], live_fetcher, source=BrowserHtmlSource(page, config.base_url))
    assert verdict.discovered
    assert verdict.ok, verdict.report()
