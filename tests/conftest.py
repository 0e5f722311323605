"""Shared fixtures: a fake site served through ``responses``."""
from __future__ import annotations

import re
from typing import Dict, List, Tuple, Union

import pytest
import requests
import responses

from sitecheck.core import Fetcher

BASE_URL = "https://site.test"

Route = Union[Tuple[int, str], Exception]


def page_html(*hrefs: str, title: str = "Page") -> str:
    """Minimal document with one anchor per href."""
    anchors = "\n".join(f'<a href="{href}">{href}</a>' for href in hrefs)
    return f"<html><head><title>{title}</title></head><body><nav>{anchors}</nav></body></html>"


class FakeSite:
    """Routes keyed by path (query string included) answering GET requests."""

    def __init__(self) -> None:
        self.routes: Dict[str, Route] = {}
        self.hits: List[str] = []

    def add(self, path: str, html: str = "", status: int = 200) -> None:
        self.routes[path] = (status, html)

    def add_error(self, path: str, error: Exception) -> None:
        self.routes[path] = error

    def handle(self, request):
        path = request.path_url
        self.hits.append(path)
        route = self.routes.get(path)
        if route is None:
            return 404, {"Content-Type": "text/html"}, "<html><body>Not found</body></html>"
        if isinstance(route, Exception):
            raise route
        status, html = route
        return status, {"Content-Type": "text/html"}, html


@pytest.fixture
def site():
    fake = FakeSite()
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add_callback(
            responses.GET,
            re.compile(re.escape(BASE_URL) + r"/.*"),
            callback=fake.handle,
        )
        yield fake


@pytest.fixture
def fetcher():
    f = Fetcher(BASE_URL, timeout_s=5.0, user_agent="sitecheck-tests")
    yield f
    f.close()


@pytest.fixture
def connection_refused():
    return requests.ConnectionError("Connection refused")
