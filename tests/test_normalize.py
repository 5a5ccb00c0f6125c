"""Tests for threatfeed.normalize."""

from threatfeed.normalize import NO_DESCRIPTION, generate_article_id, normalize_item, resolve_link
from threatfeed.tree import FeedNode, parse_xml


def _reference_id(source, url):
    """Signed 32-bit ``(h << 5) - h + c`` over UTF-16 code units."""
    text = f"{source}-{url}"
    units = [
        int.from_bytes(text.encode("utf-16-le", "surrogatepass")[i:i + 2], "little")
        for i in range(0, len(text.encode("utf-16-le", "surrogatepass")), 2)
    ]
    h = 0
    for unit in units:
        h = (h << 5) - h + unit
        h = (h + 2**31) % 2**32 - 2**31
    value = abs(h)
    digits = ""
    while True:
        value, rem = divmod(value, 36)
        digits = "0123456789abcdefghijklmnopqrstuvwxyz"[rem] + digits
        if not value:
            break
    return f"{source}-{digits}"


def _parse_item(inner):
    return parse_xml(f"<item>{inner}</item>")


class TestGenerateArticleId:
    def test_known_value(self):
        assert generate_article_id("a", "b") == "a-212u"

    def test_deterministic_output(self):
        url = "https://thehackernews.com/2024/01/some-story.html"
        assert generate_article_id("The Hacker News", url) == generate_article_id("The Hacker News", url)

    def test_prefixed_with_source(self):
        assert generate_article_id("Threatpost", "https://threatpost.com/x").startswith("Threatpost-")

    def test_matches_signed_32_bit_reference(self):
        cases = [
            ("The Hacker News", "https://thehackernews.com/2024/01/very-long-article-slug-for-overflow.html"),
            ("Bleeping Computer", "https://www.bleepingcomputer.com/news/security/example/"),
            ("Security Affairs", "https://securityaffairs.com/157000/hacking/café-\U0001f512.html"),
        ]
        for source, url in cases:
            assert generate_article_id(source, url) == _reference_id(source, url)

    def test_different_url_produces_different_id(self):
        assert generate_article_id("s", "https://x.com/1") != generate_article_id("s", "https://x.com/2")


class TestResolveLink:
    def test_single_text_link(self):
        links = [FeedNode("link", contents=(" https://example.com/a ",))]
        assert resolve_link(links) == "https://example.com/a"

    def test_prefers_alternate(self):
        links = [
            FeedNode("link", attrs=(("rel", "self"), ("href", "https://example.com/self"))),
            FeedNode("link", attrs=(("rel", "alternate"), ("href", "https://example.com/alt"))),
        ]
        assert resolve_link(links) == "https://example.com/alt"

    def test_then_link_without_rel(self):
        links = [
            FeedNode("link", attrs=(("rel", "self"), ("href", "https://example.com/self"))),
            FeedNode("link", attrs=(("href", "https://example.com/plain"),)),
        ]
        assert resolve_link(links) == "https://example.com/plain"

    def test_then_first(self):
        links = [
            FeedNode("link", attrs=(("rel", "self"), ("href", "https://example.com/self"))),
            FeedNode("link", attrs=(("rel", "related"), ("href", "https://example.com/rel"))),
        ]
        assert resolve_link(links) == "https://example.com/self"

    def test_empty(self):
        assert resolve_link([]) == ""


class TestNormalizeItem:
    def test_builds_article(self):
        item = _parse_item(
            "<title>Zero-day &amp; more</title>"
            "<link>https://example.com/zero-day</link>"
            "<description>&lt;p&gt;Exploited in the wild&lt;/p&gt;</description>"
            "<pubDate>Wed, 03 Jan 2024 08:00:00 GMT</pubDate>"
        )
        article = normalize_item(item, "Example")
        assert article.title == "Zero-day & more"
        assert article.url == "https://example.com/zero-day"
        assert article.description == "Exploited in the wild"
        assert article.published_date == "Wed, 03 Jan 2024 08:00:00 GMT"
        assert article.source == "Example"
        assert article.id == generate_article_id("Example", "https://example.com/zero-day")
        assert article.image_url is None

    def test_comparison_in_title_kept(self):
        item = _parse_item(
            "<title>Update now: builds &lt;= 17.2 exploited</title>"
            "<link>https://example.com/builds</link>"
            "<description>Versions &amp;lt; 2.3 are affected</description>"
        )
        article = normalize_item(item, "Example")
        assert article.title == "Update now: builds <= 17.2 exploited"
        assert article.description == "Versions < 2.3 are affected"

    def test_missing_link_skipped(self):
        assert normalize_item(_parse_item("<title>Only a title</title>"), "Example") is None

    def test_missing_title_skipped(self):
        assert normalize_item(_parse_item("<link>https://example.com/x</link>"), "Example") is None

    def test_non_http_link_skipped(self):
        item = _parse_item("<title>Bad</title><link>javascript:alert(1)</link>")
        assert normalize_item(item, "Example") is None

    def test_guid_permalink_fallback(self):
        item = _parse_item("<title>Guid only</title><guid>https://example.com/guid-story</guid>")
        assert normalize_item(item, "Example").url == "https://example.com/guid-story"

    def test_placeholder_description(self):
        item = _parse_item("<title>Bare</title><link>https://example.com/bare</link>")
        article = normalize_item(item, "Example")
        assert article.description == NO_DESCRIPTION

    def test_missing_date_defaults_to_now(self):
        item = _parse_item("<title>Undated</title><link>https://example.com/undated</link>")
        article = normalize_item(item, "Example")
        assert article.published_date.endswith("+00:00")

    def test_dublin_core_date(self):
        item = parse_xml(
            '<item xmlns:dc="http://purl.org/dc/elements/1.1/">'
            "<title>DC</title><link>https://example.com/dc</link>"
            "<dc:date>2024-03-01T00:00:00Z</dc:date></item>"
        )
        assert normalize_item(item, "Example").published_date == "2024-03-01T00:00:00Z"
