"""
Declarative page checks: each route paired with the elements it must render.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from sitecheck.core import Fetcher, extract_links_by_scheme
from sitecheck.errors import PageCheckError

logger = logging.getLogger("sitecheck")

SOCIAL_LABELS: Tuple[str, ...] = ("Facebook", "YouTube")
FOOTER_HEADINGS: Tuple[str, ...] = ("Services", "Quick Links", "Contact")
CONTACT_PHONE = "tel:505-541-0265"
CONTACT_EMAIL = "mailto:healer@healedbyspirit.com"

# Footer anchor text (exact) -> href
FOOTER_LINKS: Dict[str, str] = {
    "Healing Sessions": "/services/healing-sessions",
    "Soul Connection Workshops": "/services/workshops",
    "Connect & Radiate": "/services/connect-radiate",
    "Healer's Curriculum": "/services/healers-curriculum",
    "About Brian": "/about",
    "Shop": "/shop",
    "Contact": "/contact",
    "Terms & Conditions": "/terms",
}


@dataclass(slots=True)
class PageExpectation:
    """What a single route must render."""
    path: str
    title_includes: Optional[str] = None
    h1_includes: Optional[str] = None
    texts: Tuple[str, ...] = ()
    selectors: Tuple[str, ...] = ()
    link_texts: Tuple[str, ...] = ()
    # anchor text (substring) -> expected href
    links: Dict[str, str] = field(default_factory=dict)
    min_counts: Dict[str, int] = field(default_factory=dict)
    expected_status: int = 200
    footer: bool = True


@dataclass(slots=True)
class PageReport:
    """Outcome of checking one page; problems are collected, never raised."""
    path: str
    status_code: Optional[int] = None
    title: Optional[str] = None
    problems: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


SERVICE_SLUGS: Tuple[str, ...] = (
    "healing-sessions",
    "workshops",
    "connect-radiate",
    "healers-curriculum",
)

SEED_PATHS: Tuple[str, ...] = (
    "/",
    "/about",
    "/services",
    *(f"/services/{slug}" for slug in SERVICE_SLUGS),
    "/book",
    "/shop",
    "/contact",
    "/terms",
)

NAV_LINKS: Dict[str, str] = {
    "About": "/about",
    "Services": "/services",
    "Book": "/book",
    "Shop": "/shop",
    "Contact": "/contact",
}

_SERVICE_TITLES = {
    "healing-sessions": "Healing Sessions",
    "workshops": "Workshop",
    "connect-radiate": "Connect",
    "healers-curriculum": "Curriculum",
}

DEFAULT_PAGES: Tuple[PageExpectation, ...] = (
    PageExpectation(
        path="/",
        title_includes="Healed by Spirit",
        h1_includes="Healed by Spirit",
        texts=("Our Services", "About Brian", "Locations", "Albuquerque",
               "Access The Real You", "Testimonials", "Have a Question?"),
        selectors=("header", 'header a[href="/"]', "section img", "div[aria-hidden] svg"),
        links={
            **NAV_LINKS,
            "Subscribe": "/shop",
            "Explore Services": "/services",
            "Meet Brian": "/about",
            "Contact Us": "/contact",
        },
        min_counts={'a[href^="/services/"]': 3},
    ),
    PageExpectation(
        path="/about",
        title_includes="About",
        h1_includes="About Us",
        texts=("98", "40", "60", "What My Clients Say"),
        selectors=("iframe, video, .aspect-video", "img", 'header a[href="/"]'),
        links={"View All Services": "/services"},
    ),
    PageExpectation(
        path="/services",
        title_includes="Services",
        h1_includes="Services",
        texts=("Healing Sessions", "Soul Connection", "Connect & Radiate",
               "Curriculum", "Ready to Begin Your Journey"),
        links={"Get in Touch": "/contact", "Browse Shop": "/shop"},
        min_counts={'a[href^="/services/"]': 4},
    ),
    *(
        PageExpectation(
            path=f"/services/{slug}",
            title_includes=title,
            selectors=("h1",),
            links={
                "All Services": "/services",
                "Contact Us": "/contact",
                "Purchase in Shop": "/shop",
            },
            min_counts={"h2": 1},
        )
        for slug, title in _SERVICE_TITLES.items()
    ),
    PageExpectation(
        path="/book",
        title_includes="Book",
        h1_includes="Access The Real You",
        texts=("Touching Your Divinity", "Print Book", "Audiobook", "About the Book",
               "What Readers Say", "Ready to Access The Real You"),
        selectors=('img[alt*="Access the Real You"]', "div[aria-hidden] svg"),
        links={"Print Book": "/shop?category=Books", "Visit Shop": "/shop"},
    ),
    PageExpectation(
        path="/shop",
        title_includes="Shop",
        h1_includes="Shop",
        texts=("Online checkout is being set up",),
        selectors=("section img", f'section a[href="{CONTACT_PHONE}"]'),
        min_counts={"button": 1},
    ),
    PageExpectation(
        path="/contact",
        title_includes="Contact",
        h1_includes="Contact",
        texts=("Get in Touch", "505-541-0265", "healer@healedbyspirit.com", "Albuquerque"),
        selectors=('input[name="name"]', 'input[name="email"]', 'textarea[name="message"]',
                   'button[type="submit"]', 'img[alt="Brian Kurtz"]'),
    ),
    PageExpectation(
        path="/terms",
        title_includes="Terms",
        h1_includes="Terms",
        texts=("Disclaimer", "Refund Policy", "Privacy", "Intellectual Property"),
        selectors=(f'a[href="{CONTACT_EMAIL}"]',),
    ),
    PageExpectation(path="/nonexistent-page-xyz", expected_status=404, footer=False),
)


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def _check_link(anchors: List[Tuple[str, str]], text: str, href: str, exact: bool = False) -> Optional[str]:
    """Return a problem unless some anchor with ``text`` points at ``href``."""
    if exact:
        targets = [h for t, h in anchors if t == text]
    else:
        targets = [h for t, h in anchors if _contains(t, text)]
    if not targets:
        return f"no link with text {text!r}"
    if href not in targets:
        return f"link {text!r} points to {targets[0]!r}, expected {href!r}"
    return None


def _anchors(soup) -> List[Tuple[str, str]]:
    return [(a.get_text(" ", strip=True), a.get("href") or "") for a in soup.find_all("a")]


def check_footer(soup: BeautifulSoup, year: Optional[int] = None) -> List[str]:
    """Return problems with the site footer: columns, links, contact protocols, social links, copyright."""
    footer = soup.find("footer")
    if footer is None:
        return ["missing <footer>"]

    problems: List[str] = []
    headings = [h.get_text(" ", strip=True) for h in footer.find_all("h3")]
    for expected in FOOTER_HEADINGS:
        if not any(_contains(h, expected) for h in headings):
            problems.append(f"footer heading {expected!r} not found")

    anchors = _anchors(footer)
    for text, href in FOOTER_LINKS.items():
        problem = _check_link(anchors, text, href, exact=True)
        if problem:
            problems.append(f"footer {problem}")

    links = extract_links_by_scheme(str(footer))
    for scheme, expected in (("tel", CONTACT_PHONE), ("mailto", CONTACT_EMAIL)):
        if not links[scheme]:
            problems.append(f"footer has no {scheme}: link")
        elif expected not in links[scheme]:
            problems.append(f"footer {scheme}: link is {sorted(links[scheme])}, expected {expected!r}")

    for label in SOCIAL_LABELS:
        anchor = footer.find("a", attrs={"aria-label": label})
        if anchor is None:
            problems.append(f"footer social link {label!r} not found")
            continue
        if anchor.get("target") != "_blank":
            problems.append(f"footer social link {label!r} does not open in a new tab")
        # bs4 splits rel into a list
        if "noopener" not in (anchor.get("rel") or []):
            problems.append(f"footer social link {label!r} is missing rel=noopener")

    year_text = str(year or date.today().year)
    if year_text not in footer.get_text(" ", strip=True):
        problems.append(f"footer does not show the year {year_text}")
    return problems


def check_html(expectation: PageExpectation, html: str) -> Tuple[Optional[str], List[str]]:
    """Compare rendered HTML with an expectation; returns (title, problems)."""
    soup = BeautifulSoup(html, "lxml")
    problems: List[str] = []

    title = None
    if soup.title and soup.title.string:
        title = soup.title.string.strip() or None
    if expectation.title_includes and not _contains(title or "", expectation.title_includes):
        problems.append(f"title {title!r} does not include {expectation.title_includes!r}")

    if expectation.h1_includes:
        h1_texts = [h.get_text(" ", strip=True) for h in soup.find_all("h1")]
        if not any(_contains(t, expectation.h1_includes) for t in h1_texts):
            problems.append(f"no <h1> containing {expectation.h1_includes!r} (found {h1_texts})")

    page_text = soup.get_text(" ", strip=True)
    for text in expectation.texts:
        if not _contains(page_text, text):
            problems.append(f"text {text!r} not found")

    for selector in expectation.selectors:
        if not soup.select(selector):
            problems.append(f"selector {selector!r} matched nothing")

    anchors = _anchors(soup)
    for text in expectation.link_texts:
        if not any(_contains(t, text) for t, _ in anchors):
            problems.append(f"no link with text {text!r}")

    for text, href in expectation.links.items():
        problem = _check_link(anchors, text, href)
        if problem:
            problems.append(problem)

    for selector, minimum in expectation.min_counts.items():
        count = len(soup.select(selector))
        if count < minimum:
            problems.append(f"selector {selector!r} matched {count}, expected at least {minimum}")

    if expectation.footer:
        problems.extend(check_footer(soup))

    return title, problems




def check_page(expectation: PageExpectation, fetcher: Fetcher) -> PageReport:
    """Fetch a route and record every way it differs from its expectation."""
    result = fetcher.fetch(expectation.path, want_body=True)
    report = PageReport(path=expectation.path, status_code=result.status_code)

    if result.status_code is None:
        report.problems.append(f"request failed: {result.error}")
        return report
    if result.status_code != expectation.expected_status:
        report.problems.append(f"status {result.status_code}, expected {expectation.expected_status}")
        return report
    if expectation.expected_status != 200:
        return report

    report.title, problems = check_html(expectation, result.body or "")
    report.problems.extend(problems)
    return report


def check_pages(expectations: Sequence[PageExpectation], fetcher: Fetcher) -> List[PageReport]:
    reports = []
    for expectation in expectations:
        report = check_page(expectation, fetcher)
        if not report.ok:
            logger.warning("%s: %d problem(s)", report.path, len(report.problems))
        reports.append(report)
    return reports


def raise_for_failures(reports: Sequence[PageReport]) -> None:
    """Raise PageCheckError listing every problem if any report failed."""
    if any(not r.ok for r in reports):
        raise PageCheckError(reports)
