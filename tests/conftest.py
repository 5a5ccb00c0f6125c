"""Shared feed documents for the threatfeed tests."""

import pytest

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Example Security</title>
    <link>https://example.com/</link>
    <item>
      <title>Breach &amp; Leak</title>
      <link>https://example.com/news/breach</link>
      <description><![CDATA[<p>Attackers <b>stole</b> data.</p>]]></description>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
      <media:content url="https://cdn.example.com/breach.jpg" medium="image"/>
    </item>
    <item>
      <title>Ransomware hits hospital</title>
      <link>https://example.com/news/ransomware</link>
      <description><![CDATA[<p><img src="/uploads/ransom.png" width="800" height="450"/>Systems offline.</p>]]></description>
      <pubDate>Tue, 02 Jan 2024 09:30:00 GMT</pubDate>
    </item>
    <item>
      <title>No link here</title>
      <description>Dropped</description>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Example</title>
  <logo>https://example.org/static/logo.png</logo>
  <entry>
    <title type="html">Patch Tuesday roundup</title>
    <link rel="self" href="https://example.org/api/entries/1"/>
    <link rel="alternate" href="https://example.org/posts/patch-tuesday"/>
    <id>urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6</id>
    <updated>2024-02-01T12:00:00Z</updated>
    <summary>Fixes for &lt;b&gt;critical&lt;/b&gt; bugs</summary>
  </entry>
</feed>
"""

RDF_FEED = """<?xml version="1.0"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns="http://purl.org/rss/1.0/"
         xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel rdf:about="https://example.net/">
    <title>RDF Example</title>
  </channel>
  <item rdf:about="https://example.net/advisory/1">
    <title>Advisory one</title>
    <link>https://example.net/advisory/1</link>
    <dc:date>2024-03-01T00:00:00Z</dc:date>
  </item>
</rdf:RDF>
"""


def rss_with_items(count, prefix="https://example.com/story/"):
    items = "".join(
        f"<item><title>Story {i}</title><link>{prefix}{i}</link>"
        f"<pubDate>Mon, 01 Jan 2024 {i % 24:02d}:00:00 GMT</pubDate></item>"
        for i in range(count)
    )
    return f'<?xml version="1.0"?><rss version="2.0"><channel><title>Many</title>{items}</channel></rss>'


@pytest.fixture
def rss_feed():
    return RSS_FEED


@pytest.fixture
def atom_feed():
    return ATOM_FEED


@pytest.fixture
def rdf_feed():
    return RDF_FEED


@pytest.fixture
def many_items_feed():
    return rss_with_items
