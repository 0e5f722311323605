"""
Command-line interface for sitecheck.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import urlparse

from sitecheck.config import CheckConfig
from sitecheck.core import Fetcher, Verdict, crawl_links
from sitecheck.pages import DEFAULT_PAGES, SEED_PATHS, PageReport, check_pages
from sitecheck.sources import BrowserHtmlSource, browser_session


def print_link_summary(verdict: Verdict) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("LINK CHECK SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Links discovered:       {len(verdict.discovered)}\n")
    sys.stderr.write(f"Links verified:         {verdict.verified}\n")
    sys.stderr.write(f"Failures:               {len(verdict.failures)}\n\n")
    sys.stderr.write(verdict.report() + "\n\n")


def print_page_summary(reports: Sequence[PageReport]) -> None:
    """Print page check summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("PAGE CHECK SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    for report in reports:
        status_str = str(report.status_code) if report.status_code else "ERR"
        mark = "✓" if report.ok else "✗"
        sys.stderr.write(f"  {mark} {status_str} {report.path}\n")
        for problem in report.problems:
            sys.stderr.write(f"      - {problem}\n")

    failed = sum(1 for r in reports if not r.ok)
    sys.stderr.write(f"\n{len(reports) - failed}/{len(reports)} pages OK.\n\n")


def generate_output_path(base_url: str, kind: str) -> Path:
    """Generate output path: checks/{hostname}_{kind}_{datetime}.json"""
    parsed = urlparse(base_url)
    hostname = parsed.hostname or "unknown"
    # Sanitize hostname for filename (replace dots with underscores)
    hostname_safe = hostname.replace(".", "_")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    checks_dir = Path("checks")
    checks_dir.mkdir(exist_ok=True)

    return checks_dir / f"{hostname_safe}_{kind}_{timestamp}.json"


def verdict_payload(verdict: Verdict) -> dict:
    return {
        "ok": verdict.ok,
        "discovered": sorted(verdict.discovered),
        "verified": verdict.verified,
        "failures": [dict(asdict(f), message=str(f)) for f in verdict.failures],
    }


def write_output(payload, args: argparse.Namespace, base_url: str, kind: str) -> None:
    json_text = json.dumps(payload, ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
        return
    output_path = Path(args.out) if args.out else generate_output_path(base_url, kind)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json_text, encoding="utf-8")
    if args.verbose:
        sys.stderr.write(f"Results written to: {output_path}\n")


def run_links(args: argparse.Namespace, config: CheckConfig) -> int:
    seeds = args.seeds or list(SEED_PATHS)
    fetcher = Fetcher(config.base_url, timeout_s=config.timeout_s, user_agent=config.user_agent)

    if args.verbose:
        sys.stderr.write(f"Checking links on: {config.base_url}\n")
        sys.stderr.write(f"Seeds: {len(seeds)} | Workers: {config.max_workers}")
        sys.stderr.write(" | Source: browser\n\n" if args.browser else " | Source: raw\n\n")

    try:
        if args.browser:
            with browser_session(config) as page:
                source = BrowserHtmlSource(page, config.base_url)
                verdict = crawl_links(seeds, fetcher, source=source, max_workers=config.max_workers)
        else:
            verdict = crawl_links(seeds, fetcher, max_workers=config.max_workers)
    finally:
        fetcher.close()

    if args.verbose:
        print_link_summary(verdict)
    elif not verdict.ok:
        sys.stderr.write(verdict.report() + "\n")

    write_output(verdict_payload(verdict), args, config.base_url, "links")
    return 0 if verdict.ok else 1


def run_pages(args: argparse.Namespace, config: CheckConfig) -> int:
    fetcher = Fetcher(config.base_url, timeout_s=config.timeout_s, user_agent=config.user_agent)
    try:
        reports = check_pages(DEFAULT_PAGES, fetcher)
    finally:
        fetcher.close()

    if args.verbose or not all(r.ok for r in reports):
        print_page_summary(reports)

    write_output([asdict(r) for r in reports], args, config.base_url, "pages")
    return 0 if all(r.ok for r in reports) else 1


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--base-url", help="Site origin (default: $BASE_URL or the preview deployment)")
    common.add_argument("--timeout", type=float, help="Request timeout in seconds (default: 15)")
    common.add_argument("--workers", type=int, help="Maximum concurrent requests (default: 8)")
    common.add_argument("--user-agent", help="User-Agent header")
    common.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in checks/)")
    common.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    common.add_argument("--verbose", action="store_true", help="Show progress and summary")

    parser = argparse.ArgumentParser(
        prog="sitecheck",
        description="Check page content and internal link integrity of a website.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    links = subparsers.add_parser(
        "links", parents=[common],
        help="Verify every internal link found on the seed pages returns 200",
    )
    links.add_argument("seeds", nargs="*", help="Seed paths (default: every known route)")
    links.add_argument("--browser", action="store_true", help="Read seed links from a rendered browser DOM")
    links.set_defaults(handler=run_links)

    pages = subparsers.add_parser(
        "pages", parents=[common],
        help="Check every known route renders its expected elements",
    )
    pages.set_defaults(handler=run_pages)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the sitecheck CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = CheckConfig.from_env(
            base_url=args.base_url,
            timeout_s=args.timeout,
            max_workers=args.workers,
            user_agent=args.user_agent,
        )
    except ValueError as e:
        parser.error(str(e))

    return args.handler(args, config)


if __name__ == "__main__":
    raise SystemExit(main())
