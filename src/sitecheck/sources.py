"""
Browser-rendered HTML source for seed discovery.

The crawl orchestrator only needs a ``get_html(path)`` method. ``Fetcher``
provides one over plain HTTP; ``BrowserHtmlSource`` reads the live DOM
instead. Link extraction is the same either way.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page, sync_playwright

from sitecheck.config import CheckConfig
from sitecheck.core import FetchResult

logger = logging.getLogger("sitecheck")


class BrowserHtmlSource:
    """Seed HTML read from the live DOM of a Playwright page after navigation."""

    thread_safe = False

    def __init__(self, page: Page, base_url: str) -> None:
        self.page = page
        self.base_url = base_url.rstrip("/")

    def get_html(self, path: str) -> FetchResult:
        """
        Navigate to ``path`` and return the rendered DOM.

        A redirected navigation reports the status of the first hop and no
        body, matching the raw fetcher which never follows redirects.
        """
        if not path.startswith("/"):
            raise ValueError(f"Path must start with '/': {path!r}")
        url = self.base_url + path
        result = FetchResult(path=path)
        try:
            response = self.page.goto(url, wait_until="domcontentloaded")
            if response is None:
                result.error = "navigation returned no response"
                return result

            first = response.request
            redirected = False
            while first.redirected_from is not None:
                first = first.redirected_from
                redirected = True
            if redirected:
                first_response = first.response()
                if first_response is None:
                    result.error = "redirect returned no response"
                else:
                    result.status_code = first_response.status
                logger.debug("Navigation to %s was redirected to %s", url, response.url)
                return result

            result.status_code = response.status
            result.body = self.page.content()
        except PlaywrightError as e:
            logger.debug("Navigation to %s failed: %s", url, e)
            result.error = f"{type(e).__name__}: {e.message}"
        return result


@contextmanager
def browser_session(config: CheckConfig) -> Iterator[Page]:
    """Launch headless Chromium and yield a page configured from ``config``."""
    width, height = config.viewport
    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=True)
        try:
            context = browser.new_context(
                viewport={"width": width, "height": height},
                user_agent=config.user_agent,
            )
            page = context.new_page()
            page.set_default_navigation_timeout(config.navigation_timeout_s * 1000)
            yield page
        finally:
            browser.close()
