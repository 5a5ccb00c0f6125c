"""Concurrent collection of articles from every configured source."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from .config import FeedConfig, load_config
from .dates import recency_key
from .fetcher import FeedFetcher, FetchError
from .models import Article, NewsSource
from .parser import parse_feed

logger = logging.getLogger(__name__)


def dedupe_articles(article_lists: Iterable[Sequence[Article]]) -> List[Article]:
    """Merge lists in order, keeping the first article seen for each URL."""
    seen_urls = set()
    merged = []
    for articles in article_lists:
        for article in articles:
            url_key = article.url.lower()
            if url_key in seen_urls:
                continue
            seen_urls.add(url_key)
            merged.append(article)
    return merged


def sort_by_recency(articles: Iterable[Article]) -> List[Article]:
    return sorted(articles, key=lambda article: recency_key(article.published_date))


class FeedAggregator:
    """Runs fetch + parse for every source and merges the results.

    A failing source contributes no articles; it never aborts or delays the
    others beyond its own timeout.
    """

    def __init__(self, config: Optional[FeedConfig] = None, fetcher: Optional[FeedFetcher] = None):
        self.config = config or load_config()
        self.fetcher = fetcher or FeedFetcher(proxies=self.config.proxies, timeout=self.config.timeout)

    def fetch_source(self, source: NewsSource) -> List[Article]:
        try:
            xml_text = self.fetcher.fetch(source.url)
            articles = parse_feed(xml_text, source.name, max_items=self.config.max_items_per_feed)
        except FetchError as exc:
            logger.warning("Error fetching feed from %s: %s", source.name, exc)
            return []
        except Exception as exc:
            logger.exception("Unexpected failure processing feed from %s: %s", source.name, exc)
            return []
        logger.info("Found %d articles from %s", len(articles), source.name)
        return articles

    def fetch_all(self, sources: Optional[Sequence[NewsSource]] = None) -> List[Article]:
        sources = list(self.config.sources if sources is None else sources)
        if not sources:
            return []
        with ThreadPoolExecutor(max_workers=len(sources)) as executor:
            results = list(executor.map(self.fetch_source, sources))
        merged = dedupe_articles(results)
        logger.info("Total articles collected: %d", len(merged))
        return sort_by_recency(merged)


def fetch_all_articles(
    sources: Optional[Sequence[NewsSource]] = None,
    config: Optional[FeedConfig] = None,
) -> List[Article]:
    """Fetch, merge, dedupe and sort articles from all configured sources."""
    aggregator = FeedAggregator(config)
    try:
        return aggregator.fetch_all(sources)
    finally:
        aggregator.fetcher.close()


def list_source_names(config: Optional[FeedConfig] = None) -> List[str]:
    config = config or load_config()
    return [source.name for source in config.sources]


__all__ = [
    "FeedAggregator",
    "dedupe_articles",
    "fetch_all_articles",
    "list_source_names",
    "sort_by_recency",
]
