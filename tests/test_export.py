"""Tests for filtering, export snapshots and the streaming result collector."""

from datetime import date
import json
from pathlib import Path

from sdcrawl.crawler import DataFormat
from sdcrawl.grouping import (
    ExportSnapshot,
    ItemFilter,
    ResultCollector,
    default_export_filename,
    group_structured_data,
    unique_formats,
    unique_types,
    write_export,
)

from conftest import make_item


def sample_items():
    return [
        make_item({"@type": "Product", "name": "Blue Widget"}, url="https://example.com/widgets/blue"),
        make_item({"@type": "Product", "name": "Red Gadget"}, url="https://example.com/gadgets/red"),
        make_item(
            {"title": "Welcome", "type": "website"},
            url="https://example.com/",
            data_format=DataFormat.OPENGRAPH,
            item_type="website",
        ),
        make_item({"@type": "Organization", "name": "Acme"}, url="https://example.com/about"),
    ]


class TestItemFilter:
    def test_default_matches_everything(self) -> None:
        items = sample_items()
        item_filter = ItemFilter()

        assert not item_filter.active
        assert item_filter.filter_items(items) == items

    def test_search_is_case_insensitive_over_url_type_and_payload(self) -> None:
        items = sample_items()

        assert [item.url for item in ItemFilter(search_term="WIDGET").filter_items(items)] == [
            "https://example.com/widgets/blue"
        ]
        assert len(ItemFilter(search_term="organization").filter_items(items)) == 1
        assert len(ItemFilter(search_term="gadgets/").filter_items(items)) == 1
        assert ItemFilter(search_term="nothing-like-this").filter_items(items) == []

    def test_type_and_format_are_exact(self) -> None:
        items = sample_items()

        assert len(ItemFilter(item_type="Product").filter_items(items)) == 2
        assert ItemFilter(item_type="product").filter_items(items) == []
        assert [item.type for item in ItemFilter(item_format="OpenGraph").filter_items(items)] == ["website"]
        assert len(ItemFilter(item_type="Product", search_term="red").filter_items(items)) == 1

    def test_snippet_matching(self) -> None:
        snippets = group_structured_data(sample_items())

        matched = ItemFilter(search_term="acme").filter_snippets(snippets)
        assert [snippet.type for snippet in matched] == ["Organization"]
        assert len(ItemFilter(item_format="JSON-LD").filter_snippets(snippets)) == 3

    def test_unique_values_sorted(self) -> None:
        items = sample_items() + [make_item({"name": "untyped"})]

        assert unique_types(items) == ["Organization", "Product", "website"]
        assert unique_formats(items) == ["JSON-LD", "OpenGraph"]


class TestExport:
    def test_default_filename(self) -> None:
        assert default_export_filename(date(2024, 5, 1)) == "structured-data-2024-05-01.json"

    def test_snapshot_keeps_total_and_all_snippets(self) -> None:
        items = sample_items()
        snippets = group_structured_data(items)

        snapshot = ExportSnapshot.build(items, snippets, item_filter=ItemFilter(item_type="Product"))

        assert snapshot.total_items == 4
        assert len(snapshot.items) == 2
        assert len(snapshot.snippets) == len(snippets)
        assert snapshot.crawled_at.endswith("+00:00")

    def test_write_export(self, tmp_path: Path) -> None:
        items = sample_items()
        snapshot = ExportSnapshot.build(items, group_structured_data(items))
        target = tmp_path / "nested" / default_export_filename(date(2024, 5, 1))

        written = write_export(snapshot, target)

        assert written == target
        payload = json.loads(target.read_text(encoding="utf-8"))
        assert set(payload) == {"crawled_at", "total_items", "items", "snippets"}
        assert payload["total_items"] == 4
        assert payload["items"][0]["format"] == "JSON-LD"
        assert payload["snippets"][0]["duplicate_count"] == 1
        assert list(target.parent.glob("*.tmp")) == []


class TestResultCollector:
    def test_regroups_on_each_batch(self) -> None:
        collector = ResultCollector()
        repeated = {"@type": "Organization", "name": "Acme"}

        collector.on_data([make_item(repeated, url="https://example.com/a")])
        collector.on_data([])
        collector.on_data(
            [
                make_item(repeated, url="https://example.com/b"),
                make_item({"@type": "WebPage"}, url="https://example.com/b"),
            ]
        )
        collector.on_progress(2, 3)

        assert len(collector.items) == 3
        assert [snippet.duplicate_count for snippet in collector.snippets] == [2, 1]
        assert (collector.pages_crawled, collector.structured_data_found) == (2, 3)

        snapshot = collector.snapshot(ItemFilter(item_type="WebPage"))
        assert snapshot.total_items == 3
        assert len(snapshot.items) == 1

        collector.clear()
        assert collector.items == []
        assert collector.snippets == []
        assert collector.pages_crawled == 0
