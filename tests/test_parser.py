"""Tests for threatfeed.parser and feed-shape detection."""

import pytest

from threatfeed.normalize import NO_DESCRIPTION
from threatfeed.parser import parse_feed
from threatfeed.tree import FeedFormat, detect_feed, parse_xml


class TestDetectFeed:
    def test_rss(self, rss_feed):
        document = detect_feed(parse_xml(rss_feed))
        assert document.format is FeedFormat.RSS2
        assert len(document.items) == 3

    def test_atom(self, atom_feed):
        assert detect_feed(parse_xml(atom_feed)).format is FeedFormat.ATOM

    def test_rdf(self, rdf_feed):
        assert detect_feed(parse_xml(rdf_feed)).format is FeedFormat.RDF

    def test_rss_without_items(self):
        assert detect_feed(parse_xml("<rss><channel><title>Empty</title></channel></rss>")) is None

    def test_unknown_root(self):
        assert detect_feed(parse_xml("<html><body>Not a feed</body></html>")) is None


class TestParseFeed:
    def test_rss_items(self, rss_feed):
        articles = parse_feed(rss_feed, "Example")

        assert [a.title for a in articles] == ["Breach & Leak", "Ransomware hits hospital"]
        breach, ransom = articles
        assert breach.description == "Attackers stole data."
        assert breach.image_url == "https://cdn.example.com/breach.jpg"
        assert breach.published_date == "Mon, 01 Jan 2024 10:00:00 GMT"
        assert ransom.description == "Systems offline."
        assert ransom.image_url == "https://example.com/uploads/ransom.png"

    def test_atom_entry(self, atom_feed):
        (article,) = parse_feed(atom_feed, "Atom Source")

        assert article.title == "Patch Tuesday roundup"
        assert article.url == "https://example.org/posts/patch-tuesday"
        assert article.description == "Fixes for critical bugs"
        assert article.published_date == "2024-02-01T12:00:00Z"
        assert article.image_url == "https://example.org/static/logo.png"

    def test_rdf_item(self, rdf_feed):
        (article,) = parse_feed(rdf_feed, "RDF Source")

        assert article.title == "Advisory one"
        assert article.url == "https://example.net/advisory/1"
        assert article.description == NO_DESCRIPTION
        assert article.published_date == "2024-03-01T00:00:00Z"
        assert article.image_url is None

    def test_single_rss_item(self, many_items_feed):
        articles = parse_feed(many_items_feed(1), "Single")

        assert len(articles) == 1
        assert articles[0].title == "Story 0"
        assert articles[0].url == "https://example.com/story/0"

    def test_caps_items_per_feed(self, many_items_feed):
        assert len(parse_feed(many_items_feed(25), "Many")) == 20

    def test_custom_cap(self, many_items_feed):
        assert len(parse_feed(many_items_feed(10), "Many", max_items=3)) == 3

    @pytest.mark.parametrize(
        "body",
        ["", "   ", "not xml at all", "<html><body>Blocked</body></html>", "<rss><channel/></rss>"],
    )
    def test_unusable_documents_yield_nothing(self, body):
        assert parse_feed(body, "Broken") == []

    def test_bad_item_does_not_abort_feed(self):
        xml = (
            "<rss><channel>"
            "<item><title>Good</title><link>https://example.com/good</link></item>"
            "<item><link>https://example.com/untitled</link></item>"
            "</channel></rss>"
        )
        assert [a.title for a in parse_feed(xml, "Mixed")] == ["Good"]
