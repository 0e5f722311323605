"""Tests for the command-line interface."""
from __future__ import annotations

import json

import pytest

from sitecheck import cli
from sitecheck.pages import PageExpectation

from conftest import BASE_URL, page_html


def run(capsys, *argv: str):
    code = cli.main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


@pytest.fixture
def small_site(site):
    site.add("/", page_html("/about", "/shop"))
    site.add("/about", page_html("/"))
    site.add("/shop", page_html("/"))
    return site


class TestLinksCommand:
    def test_clean_run_exits_zero(self, small_site, capsys) -> None:
        code, out, err = run(capsys, "links", "/", "--base-url", BASE_URL, "--workers", "1", "--out", "-")
        payload = json.loads(out)
        assert code == 0
        assert payload["ok"] is True
        assert payload["discovered"] == ["/about", "/shop"]
        assert payload["verified"] == 2
        assert payload["failures"] == []
        assert err == ""

    def test_broken_link_exits_one_and_reports(self, small_site, capsys) -> None:
        small_site.add("/shop", status=301)
        code, out, err = run(capsys, "links", "/", "--base-url", BASE_URL, "--out", "-")
        payload = json.loads(out)
        assert code == 1
        assert payload["failures"] == [{
            "path": "/shop",
            "status_code": 301,
            "error": None,
            "stage": "verification",
            "message": "/shop → 301",
        }]
        assert "/shop → 301" in err

    def test_verbose_prints_summary(self, small_site, capsys) -> None:
        code, _, err = run(capsys, "links", "/", "--base-url", BASE_URL, "--out", "-", "--verbose")
        assert code == 0
        assert "LINK CHECK SUMMARY" in err
        assert "Links verified:         2" in err

    def test_writes_output_file(self, small_site, capsys, tmp_path) -> None:
        out_file = tmp_path / "nested" / "links.json"
        code, out, _ = run(capsys, "links", "/", "--base-url", BASE_URL, "--out", str(out_file), "--pretty")
        assert code == 0
        assert out == ""
        assert json.loads(out_file.read_text(encoding="utf-8"))["ok"] is True

    def test_auto_output_path(self, small_site, capsys, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        run(capsys, "links", "/", "--base-url", BASE_URL)
        written = list((tmp_path / "checks").glob("site_test_links_*.json"))
        assert len(written) == 1

    def test_base_url_from_environment(self, small_site, capsys, monkeypatch) -> None:
        monkeypatch.setenv("BASE_URL", BASE_URL)
        code, out, _ = run(capsys, "links", "/", "--out", "-")
        assert code == 0
        assert json.loads(out)["verified"] == 2

    def test_invalid_environment_is_a_usage_error(self, capsys, monkeypatch) -> None:
        monkeypatch.setenv("SITECHECK_WORKERS", "lots")
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["links", "/"])
        assert excinfo.value.code == 2
        assert "SITECHECK_WORKERS" in capsys.readouterr().err


class TestPagesCommand:
    def test_reports_problems_and_exits_one(self, site, capsys, monkeypatch) -> None:
        monkeypatch.setattr(cli, "DEFAULT_PAGES", (
            PageExpectation(path="/", title_includes="Page", footer=False),
            PageExpectation(path="/terms", title_includes="Terms", footer=False),
        ))
        site.add("/", page_html())
        code, out, err = run(capsys, "pages", "--base-url", BASE_URL, "--out", "-")
        reports = json.loads(out)
        assert code == 1
        assert [r["path"] for r in reports] == ["/", "/terms"]
        assert reports[0]["problems"] == []
        assert reports[1]["problems"] == ["status 404, expected 200"]
        assert "PAGE CHECK SUMMARY" in err
        assert "✗ 404 /terms" in err

    def test_all_pages_ok(self, site, capsys, monkeypatch) -> None:
        monkeypatch.setattr(cli, "DEFAULT_PAGES", (PageExpectation(path="/", footer=False),))
        site.add("/", page_html())
        code, _, err = run(capsys, "pages", "--base-url", BASE_URL, "--out", "-")
        assert code == 0
        assert err == ""


def test_command_is_required(capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main([])
