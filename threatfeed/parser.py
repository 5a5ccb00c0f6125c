"""Feed document parsing and dispatch over RSS 2.0, Atom and RDF."""
from __future__ import annotations

import logging
from typing import List

from .config import DEFAULT_MAX_ITEMS
from .images import channel_image
from .models import Article
from .normalize import normalize_item
from .tree import detect_feed, parse_xml

logger = logging.getLogger(__name__)


def parse_feed(xml_text: str, source: str, max_items: int = DEFAULT_MAX_ITEMS) -> List[Article]:
    """Parse ``xml_text`` and normalize up to ``max_items`` of its items.

    Unknown document shapes and feeds without items produce an empty list.
    """
    document = detect_feed(parse_xml(xml_text))
    if document is None or not document.items:
        logger.warning("No items found in feed: %s", source)
        return []

    fallback_image = channel_image(document)
    articles = []
    for item in document.items[:max_items]:
        try:
            article = normalize_item(item, source, channel_image=fallback_image)
        except Exception as exc:
            logger.warning("Error normalizing %s item: %s", source, exc)
            continue
        if article is not None:
            articles.append(article)

    logger.info("Parsed %d articles from %s (%s)", len(articles), source, document.format.value)
    return articles


__all__ = ["parse_feed"]
