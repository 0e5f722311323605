"""
Website checks: single-hop internal link integrity and declarative page expectations.
"""
from sitecheck.config import CheckConfig
from sitecheck.core import Failure, Fetcher, FetchResult, Verdict, crawl_links, extract_internal_links
from sitecheck.errors import BrokenLinksError, PageCheckError, SiteCheckError
from sitecheck.pages import DEFAULT_PAGES, SEED_PATHS, PageExpectation, PageReport, check_page, check_pages

__version__ = "1.0.0"
__all__ = [
    "CheckConfig",
    "Failure",
    "Fetcher",
    "FetchResult",
    "Verdict",
    "crawl_links",
    "extract_internal_links",
    "BrokenLinksError",
    "PageCheckError",
    "SiteCheckError",
    "DEFAULT_PAGES",
    "SEED_PATHS",
    "PageExpectation",
    "PageReport",
    "check_page",
    "check_pages",
]
