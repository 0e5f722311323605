"""
Core link-integrity logic and data structures.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Set, Tuple
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup, SoupStrainer

from sitecheck.errors import BrokenLinksError

logger = logging.getLogger("sitecheck")

SUCCESS_STATUS = 200

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)

STAGE_DISCOVERY = "discovery"
STAGE_VERIFICATION = "verification"


@dataclass(slots=True)
class FetchResult:
    """Outcome of requesting a single path."""
    path: str
    status_code: Optional[int] = None
    body: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code == SUCCESS_STATUS


@dataclass(slots=True, frozen=True)
class Failure:
    """A link that did not resolve with status 200."""
    path: str
    status_code: Optional[int] = None
    error: Optional[str] = None
    stage: str = STAGE_VERIFICATION

    @classmethod
    def from_result(cls, result: FetchResult, stage: str) -> "Failure":
        return cls(path=result.path, status_code=result.status_code, error=result.error, stage=stage)

    def __str__(self) -> str:
        outcome = str(self.status_code) if self.status_code is not None else (self.error or "unknown error")
        return f"{self.path} → {outcome}"


@dataclass(slots=True)
class Verdict:
    """Aggregate result of a crawl."""
    failures: Tuple[Failure, ...] = ()
    discovered: Set[str] = field(default_factory=set)
    verified: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    def report(self) -> str:
        """Render every failure on its own line."""
        if self.ok:
            return f"All {self.verified} links OK."
        lines = [f"Broken links found ({len(self.failures)}):"]
        lines.extend(f"  [{f.stage}] {f}" for f in self.failures)
        return "\n".join(lines)

    def raise_for_failures(self) -> None:
        if not self.ok:
            raise BrokenLinksError(self)


class HtmlSource(Protocol):
    """Anything that can produce a page's HTML for a seed path."""

    def get_html(self, path: str) -> FetchResult:
        ...


def is_internal_href(href: str) -> bool:
    """Internal means a root-relative path; protocol-relative URLs are not."""
    return href.startswith("/") and not href.startswith("//")


def classify_href(href: str) -> str:
    """Classify an href value as internal, external, mailto, tel or other."""
    if is_internal_href(href):
        return "internal"
    scheme = urlparse(href).scheme.lower()
    if scheme in ("http", "https") or href.startswith("//"):
        return "external"
    if scheme in ("mailto", "tel"):
        return scheme
    return "other"


def _iter_hrefs(html: str) -> Iterable[str]:
    if not html:
        return []
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    hrefs = []
    for a in soup.find_all("a"):
        href = a.get("href")
        if isinstance(href, str) and href.strip():
            hrefs.append(href.strip())
    return hrefs


def extract_internal_links(html: str) -> Set[str]:
    """
    Extract distinct internal link paths from HTML text.

    Keeps href values starting with "/" verbatim, query string and fragment
    included. Absolute URLs, mailto:/tel: links and relative paths without a
    leading slash are dropped. Missing or empty hrefs are skipped.
    """
    return {href for href in _iter_hrefs(html) if is_internal_href(href)}


def extract_links_by_scheme(html: str) -> Dict[str, Set[str]]:
    """Group every href on the page by its classification."""
    groups: Dict[str, Set[str]] = {k: set() for k in ("internal", "external", "mailto", "tel", "other")}
    for href in _iter_hrefs(html):
        groups[classify_href(href)].add(href)
    return groups


class Fetcher:
    """Resolves paths against a base URL and reports their status."""

    thread_safe = True

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 15.0,
        user_agent: str = "sitecheck/1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            raise ValueError(f"Path must start with '/': {path!r}")
        # Plain concatenation; urljoin would read "/a:b" as scheme "a"
        return self.base_url + path

    def fetch(self, path: str, want_body: bool = False) -> FetchResult:
        """GET a path without following redirects; transport errors become data."""
        url = self.url_for(path)
        result = FetchResult(path=path)
        try:
            resp = self.session.get(url, timeout=self.timeout_s, allow_redirects=False)
        except requests.RequestException as e:
            result.error = f"{type(e).__name__}: {e}"
            logger.debug("GET %s failed: %s", url, result.error)
            return result

        result.status_code = resp.status_code
        if want_body:
            result.body = resp.text
        logger.debug("GET %s -> %s", url, resp.status_code)
        return result

    def get_html(self, path: str) -> FetchResult:
        return self.fetch(path, want_body=True)

    def close(self) -> None:
        self.session.close()


def _map(func, items: Sequence[str], max_workers: int) -> List[FetchResult]:
    if max_workers == 1 or len(items) <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as pool:
        return list(pool.map(func, items))


def discover_links(
    seeds: Sequence[str],
    source: HtmlSource,
    max_workers: int = 1,
) -> Tuple[Set[str], List[Failure]]:
    """
    Fetch every seed page once and union the internal links found on them.

    Links on the discovered pages are never followed. Results are merged
    only after all seed fetches complete.
    """
    for seed in seeds:
        if not seed.startswith("/"):
            raise ValueError(f"Seed path must start with '/': {seed!r}")

    results = _map(source.get_html, list(seeds), max_workers)

    discovered: Set[str] = set()
    failures: List[Failure] = []
    for result in results:
        if not result.ok:
            failures.append(Failure.from_result(result, STAGE_DISCOVERY))
            logger.warning("Seed page failed: %s", failures[-1])
            continue
        discovered |= extract_internal_links(result.body or "")

    logger.info("Discovered %d unique internal links from %d seeds", len(discovered), len(seeds))
    return discovered, failures


def verify_links(
    links: Iterable[str],
    fetcher: Fetcher,
    max_workers: int = 8,
) -> List[Failure]:
    """Fetch each link and collect every non-200 outcome."""
    results = _map(fetcher.fetch, sorted(links), max_workers)
    failures = [Failure.from_result(r, STAGE_VERIFICATION) for r in results if not r.ok]
    for failure in failures:
        logger.warning("Broken link: %s", failure)
    return failures


def crawl_links(
    seeds: Sequence[str],
    fetcher: Fetcher,
    source: Optional[HtmlSource] = None,
    max_workers: int = 8,
) -> Verdict:
    """
    Single-hop link-integrity crawl.

    Args:
        seeds: Paths known to exist, each starting with "/".
        fetcher: Used for verification, and for discovery when no source is given.
        source: Where seed HTML comes from (raw fetch or a live browser page).
        max_workers: Upper bound on concurrent fetches.

    Returns:
        A Verdict listing every failure; the crawl itself never raises for
        fetch or parse problems.
    """
    if max_workers < 1:
        raise ValueError(f"max_workers must be positive, got {max_workers}")

    if source is None:
        source = fetcher
    # Browser pages cannot be shared across threads
    discovery_workers = max_workers if getattr(source, "thread_safe", False) else 1

    discovered, failures = discover_links(seeds, source, discovery_workers)
    failures.extend(verify_links(discovered, fetcher, max_workers))

    failures.sort(key=lambda f: (f.stage != STAGE_DISCOVERY, f.path))
    return Verdict(failures=tuple(failures), discovered=discovered, verified=len(discovered))
