"""Cybersecurity news aggregation from RSS, Atom and RDF feeds."""
from .aggregator import FeedAggregator, fetch_all_articles, list_source_names
from .config import FeedConfig, load_config
from .fetcher import FeedFetcher, FetchError
from .models import Article, NewsSource, SavedArticle
from .parser import parse_feed
from .storage import SavedArticleStore

__all__ = [
    "Article",
    "FeedAggregator",
    "FeedConfig",
    "FeedFetcher",
    "FetchError",
    "NewsSource",
    "SavedArticle",
    "SavedArticleStore",
    "fetch_all_articles",
    "list_source_names",
    "load_config",
    "parse_feed",
]
