"""Tests for content grouping and connection inference."""

from collections import Counter

from sdcrawl.crawler import DataFormat
from sdcrawl.crawler.extractors import extract_structured_data
from sdcrawl.grouping import (
    ConnectionType,
    build_identifier_index,
    build_page_url_index,
    classify_connection,
    group_structured_data,
)
from sdcrawl.grouping.walk import iter_nodes, iter_strings

from conftest import json_ld, make_item, page


def _by_type(snippets):
    return {snippet.type: snippet for snippet in snippets}


class TestGrouping:
    def test_review_links_to_product(self) -> None:
        product_items = extract_structured_data(
            page(json_ld('{"@type":"Product","name":"Widget","@id":"#w1"}')),
            "https://example.com/widget",
        )
        review_items = extract_structured_data(
            page(json_ld('{"@type":"Review","itemReviewed":{"@id":"#w1"}}')),
            "https://example.com/review",
        )

        snippets = group_structured_data(product_items + review_items)

        assert len(snippets) == 2
        by_type = _by_type(snippets)
        product, review = by_type["Product"], by_type["Review"]
        assert len(review.connections) == 1
        connection = review.connections[0]
        assert connection.target_hash == product.hash
        assert connection.target_id == "#w1"
        assert connection.type == ConnectionType.REFERENCE
        assert connection.property == "itemReviewed.@id"
        assert product.connections == []

    def test_identical_payload_on_three_pages(self) -> None:
        html = page(json_ld('{"@type":"Organization","name":"Acme"}'))
        items = []
        for path in ("a", "b", "c"):
            items.extend(extract_structured_data(html, f"https://example.com/{path}"))

        snippets = group_structured_data(items)

        assert len(snippets) == 1
        assert snippets[0].duplicate_count == 3
        assert len(snippets[0].items) == 3
        assert [item.url for item in snippets[0].items] == [
            "https://example.com/a",
            "https://example.com/b",
            "https://example.com/c",
        ]

    def test_partition(self) -> None:
        items = [
            make_item({"@type": "A", "n": 1}, url="https://example.com/1"),
            make_item({"@type": "B", "n": 2}, url="https://example.com/1"),
            make_item({"n": 1, "@type": "A"}, url="https://example.com/2"),
            make_item({"title": "x"}, data_format=DataFormat.OPENGRAPH, item_type="OpenGraph"),
            make_item({"@type": "B", "n": 2}, url="https://example.com/3"),
        ]

        snippets = group_structured_data(items)

        for snippet in snippets:
            assert {item.hash for item in snippet.items} == {snippet.hash}
            assert snippet.duplicate_count == len(snippet.items)
        grouped = Counter(id(item) for snippet in snippets for item in snippet.items)
        assert grouped == Counter(id(item) for item in items)
        assert len({snippet.hash for snippet in snippets}) == len(snippets)

    def test_sorted_by_duplicate_count_then_first_seen(self) -> None:
        once_first = make_item({"@type": "First"})
        twice = make_item({"@type": "Twice"})
        once_last = make_item({"@type": "Last"})

        snippets = group_structured_data([once_first, twice, once_last, twice])

        assert [snippet.type for snippet in snippets] == ["Twice", "First", "Last"]

    def test_mixed_format(self) -> None:
        og = make_item({"title": "Same"}, data_format=DataFormat.OPENGRAPH, item_type="OpenGraph")
        twitter = make_item({"title": "Same"}, data_format=DataFormat.TWITTER_CARDS, item_type="TwitterCard")

        (snippet,) = group_structured_data([og, twitter])

        assert snippet.format == "Mixed"
        assert snippet.type == "OpenGraph"
        assert snippet.duplicate_count == 2

    def test_single_format_kept(self) -> None:
        (snippet,) = group_structured_data([make_item({"@type": "Thing"})])
        assert snippet.format == "JSON-LD"
        assert not snippet.is_mixed

    def test_no_self_connections(self) -> None:
        items = [
            make_item({"@type": "WebPage", "@id": "#page", "url": "#page", "isPartOf": {"@id": "#page"}}),
            make_item({"@type": "Thing", "@id": "#thing", "sameAs": ["#thing", "#page"]}),
        ]

        for snippet in group_structured_data(items):
            assert all(connection.target_hash != snippet.hash for connection in snippet.connections)

    def test_allow_list_and_walk_do_not_duplicate(self) -> None:
        article = make_item({"@type": "Article", "author": {"@id": "#ann", "name": "Ann"}})
        person = make_item({"@type": "Person", "@id": "#ann", "name": "Ann"})

        by_type = _by_type(group_structured_data([article, person]))

        connections = by_type["Article"].connections
        assert [(c.type, c.property, c.target_hash) for c in connections] == [
            (ConnectionType.AUTHOR, "author.@id", by_type["Person"].hash)
        ]

    def test_list_paths_and_plain_string_references(self) -> None:
        article = make_item({"@type": "Article", "mentions": ["#nobody", "#acme"], "publisher": "#acme"})
        org = make_item({"@type": "Organization", "@id": "#acme"})

        by_type = _by_type(group_structured_data([article, org]))

        assert [(c.type, c.property) for c in by_type["Article"].connections] == [
            (ConnectionType.PUBLISHER, "publisher"),
            (ConnectionType.REFERENCE, "mentions[1]"),
        ]

    def test_nested_object_with_id_is_walked_further(self) -> None:
        article = make_item(
            {
                "@type": "Article",
                "about": {"@id": "#topic", "subjectOf": {"@id": "#book"}},
            }
        )
        topic = make_item({"@type": "Thing", "@id": "#topic"})
        book = make_item({"@type": "Book", "@id": "#book"})

        by_type = _by_type(group_structured_data([article, topic, book]))

        targets = {c.target_id: c for c in by_type["Article"].connections}
        assert set(targets) == {"#topic", "#book"}
        assert targets["#topic"].property == "about.@id"
        assert targets["#book"].property == "about.subjectOf.@id"
        assert targets["#book"].type == ConnectionType.ABOUT


class TestPageUrlReferences:
    """Strings that name a crawled page link to the items found on it."""

    def test_main_entity_of_page_links_to_page_item(self) -> None:
        webpage = make_item({"@type": "WebPage", "name": "Home"}, url="https://example.com/")
        org = make_item(
            {"@type": "Organization", "name": "Acme", "mainEntityOfPage": "https://example.com/"},
            url="https://example.com/about",
        )

        by_type = _by_type(group_structured_data([webpage, org]))

        assert [(c.type, c.property, c.target_hash) for c in by_type["Organization"].connections] == [
            (ConnectionType.MAIN_ENTITY, "mainEntityOfPage", by_type["WebPage"].hash)
        ]

    def test_identifier_index_takes_priority(self) -> None:
        declared = make_item(
            {"@type": "Product", "@id": "https://example.com/p"},
            url="https://example.com/catalog",
        )
        on_page = make_item({"@type": "WebPage", "name": "P"}, url="https://example.com/p")
        referrer = make_item(
            {"@type": "Review", "itemReviewed": "https://example.com/p"},
            url="https://example.com/reviews",
        )

        by_type = _by_type(group_structured_data([declared, on_page, referrer]))

        (connection,) = by_type["Review"].connections
        assert connection.target_hash == by_type["Product"].hash

    def test_last_item_on_page_is_the_target(self) -> None:
        first = make_item({"@type": "WebPage"}, url="https://example.com/a")
        last = make_item({"@type": "BreadcrumbList"}, url="https://example.com/a")

        assert build_page_url_index([first, last]) == {"https://example.com/a": last.hash}

    def test_own_page_is_not_a_self_connection(self) -> None:
        item = make_item({"@type": "Article", "isPartOf": "https://example.com/a"}, url="https://example.com/a")

        (snippet,) = group_structured_data([item])

        assert snippet.connections == []


class TestIdentifierIndex:
    def test_declared_id_beats_nested_reference(self) -> None:
        product = make_item({"@type": "Product", "@id": "#w1"})
        review = make_item({"@type": "Review", "itemReviewed": {"@id": "#w1"}})

        assert build_identifier_index([product, review])["#w1"] == product.hash
        assert build_identifier_index([review, product])["#w1"] == product.hash

    def test_last_declaration_wins(self) -> None:
        first = make_item({"@type": "Thing", "@id": "#x", "v": 1})
        second = make_item({"@type": "Thing", "@id": "#x", "v": 2})

        assert build_identifier_index([first, second])["#x"] == second.hash
        assert build_identifier_index([second, first])["#x"] == first.hash

    def test_extracted_id_indexed(self) -> None:
        item = make_item({"@type": "Thing", "url": "https://example.com/thing"})
        assert build_identifier_index([item]) == {"https://example.com/thing": item.hash}

    def test_nested_only_ids_indexed(self) -> None:
        item = make_item({"@type": "Thing", "part": [{"@id": "#p1"}]})
        assert build_identifier_index([item]) == {"#p1": item.hash}


class TestClassifyConnection:
    def test_priority(self) -> None:
        assert classify_connection("sameAs[0]") == ConnectionType.SAME_AS
        assert classify_connection("mainEntityOfPage") == ConnectionType.MAIN_ENTITY
        assert classify_connection("about.@id") == ConnectionType.ABOUT
        assert classify_connection("creator") == ConnectionType.AUTHOR
        assert classify_connection("author.publisher") == ConnectionType.AUTHOR
        assert classify_connection("publisher.@id") == ConnectionType.PUBLISHER
        assert classify_connection("itemReviewed.@id") == ConnectionType.REFERENCE
        assert classify_connection("") == ConnectionType.REFERENCE


class TestWalk:
    def test_paths(self) -> None:
        data = {"a": {"@id": "#x", "b": [1, "two"]}, "c": "three"}
        assert list(iter_strings(data)) == [("a.@id", "#x"), ("a.b[1]", "two"), ("c", "three")]

    def test_depth_cap(self) -> None:
        deep = "leaf"
        for _ in range(10):
            deep = {"k": deep}

        paths = [node.path for node in iter_nodes(deep, max_depth=3)]
        assert paths == ["", "k", "k.k", "k.k.k"]
