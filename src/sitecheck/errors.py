"""
Exceptions raised when a check run fails.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from sitecheck.core import Verdict
    from sitecheck.pages import PageReport


class SiteCheckError(Exception):
    """Base class for sitecheck errors."""


class BrokenLinksError(SiteCheckError):
    """Raised when a crawl verdict contains failures."""

    def __init__(self, verdict: "Verdict") -> None:
        self.verdict = verdict
        super().__init__(verdict.report())


class PageCheckError(SiteCheckError):
    """Raised when one or more pages do not match their expectations."""

    def __init__(self, reports: Sequence["PageReport"]) -> None:
        self.reports = [r for r in reports if not r.ok]
        lines = [f"{len(self.reports)} page(s) failed:"]
        for report in self.reports:
            lines.extend(f"  {report.path}: {problem}" for problem in report.problems)
        super().__init__("\n".join(lines))
