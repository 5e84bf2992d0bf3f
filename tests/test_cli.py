"""End-to-end CLI runs against an in-memory site."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sdcrawl import crawl
from sdcrawl.crawler import CrawlConfig

from conftest import FakeFetcher, json_ld, page


SITE = {
    "https://example.com/": page(
        json_ld('{"@type":"Organization","@id":"#acme","name":"Acme"}')
        + '<a href="/widget">widget</a>',
        head='<meta property="og:title" content="Acme">',
    ),
    "https://example.com/widget": page(
        json_ld('{"@type":"Product","name":"Widget","brand":{"@id":"#acme"}}')
        + json_ld('{"@type":"Organization","@id":"#acme","name":"Acme"}'),
    ),
}


class SiteFetcher(FakeFetcher):
    def __init__(self, config: CrawlConfig) -> None:
        super().__init__(SITE)


@pytest.fixture
def site(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sdcrawl.crawler.pipeline.Fetcher", SiteFetcher)


def _export_files(output_dir: Path) -> list[Path]:
    return sorted(output_dir.glob("structured-data-*.json"))


class TestCli:
    def test_crawl_writes_export(self, site, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        exit_code = crawl.main(
            ["--domain", "example.com", "--output_dir", str(tmp_path), "--delay_ms", "0", "--no_respect_robots"]
        )

        assert exit_code == 0
        (export_path,) = _export_files(tmp_path)
        payload = json.loads(export_path.read_text(encoding="utf-8"))
        assert payload["total_items"] == 4
        assert [snippet["duplicate_count"] for snippet in payload["snippets"]] == [2, 1, 1]
        assert (tmp_path / "logs" / "crawl.log").exists()
        out = capsys.readouterr().out
        assert "status: completed" in out
        assert "JSON-LD: 3" in out

        report = json.loads((tmp_path / crawl.CRAWL_REPORT_FILENAME).read_text(encoding="utf-8"))
        assert report["status"] == "completed"
        assert report["stats"]["pages_crawled"] == 2
        assert report["details"]["items"]["by_format"] == {"JSON-LD": 3, "OpenGraph": 1}
        assert report["details"]["frontier"]["snapshot"]["visited_urls"] == 2
        assert report["errors"] == []

    def test_export_filter(self, site, tmp_path: Path) -> None:
        exit_code = crawl.main(
            [
                "--domain",
                "example.com",
                "--output_dir",
                str(tmp_path),
                "--delay_ms",
                "0",
                "--no_respect_robots",
                "--type",
                "Product",
            ]
        )

        assert exit_code == 0
        payload = json.loads(_export_files(tmp_path)[0].read_text(encoding="utf-8"))
        assert payload["total_items"] == 4
        assert [item["type"] for item in payload["items"]] == ["Product"]

    def test_domain_from_config_file(self, site, tmp_path: Path) -> None:
        config_path = tmp_path / "crawl.yaml"
        config_path.write_text("domain: example.com\ndelay_ms: 0\nrespect_robots: false\nmax_depth: 0\n", encoding="utf-8")

        exit_code = crawl.main(["--config", str(config_path), "--output_dir", str(tmp_path / "out")])

        assert exit_code == 0
        payload = json.loads(_export_files(tmp_path / "out")[0].read_text(encoding="utf-8"))
        assert payload["total_items"] == 2

    def test_missing_domain(self, tmp_path: Path) -> None:
        assert crawl.main(["--output_dir", str(tmp_path)]) == 2
        assert _export_files(tmp_path) == []

    def test_invalid_option_value(self, tmp_path: Path) -> None:
        assert crawl.main(["--domain", "example.com", "--output_dir", str(tmp_path), "--max_pages", "0"]) == 2

    def test_unusable_domain_is_an_error(self, site, tmp_path: Path) -> None:
        exit_code = crawl.main(["--domain", "http://", "--output_dir", str(tmp_path), "--no_respect_robots"])

        assert exit_code == 1
        assert _export_files(tmp_path) == []
        report = json.loads((tmp_path / crawl.CRAWL_REPORT_FILENAME).read_text(encoding="utf-8"))
        assert report["status"] == "error"
        assert report["details"]["errors"]["by_stage"] == {"setup": 1}
        assert report["errors"][0]["stage"] == "setup"
