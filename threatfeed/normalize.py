"""Mapping of RSS/Atom/RDF items onto :class:`~threatfeed.models.Article`."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import urlsplit

from .images import extract_image
from .models import Article
from .text import clean_description, clean_text
from .tree import FeedNode

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description available"

DESCRIPTION_FIELDS = ("description", "encoded", "summary", "content")
DATE_FIELDS = ("pubDate", "published", "date", "updated", "issued", "modified")

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_article_id(source: str, url: str) -> str:
    """Stable id for ``(source, url)``.

    ``hash = hash * 31 + code_unit`` over the UTF-16 code units of
    ``"{source}-{url}"`` with signed 32-bit wraparound, so ids match the ones
    the mobile client already stored.
    """
    data = f"{source}-{url}".encode("utf-16-le", "surrogatepass")
    value = 0
    for index in range(0, len(data), 2):
        code_unit = data[index] | (data[index + 1] << 8)
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return f"{source}-{_to_base36(abs(value))}"


def _is_http_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme.lower() in ("http", "https") and bool(parts.netloc)


def _link_target(link: FeedNode) -> str:
    return (link.attr("href", "url") or link.text).strip()


def resolve_link(links: List[FeedNode]) -> str:
    """Article URL from one or many ``<link>`` elements.

    Atom entries may carry several links; ``rel="alternate"`` wins, then a
    link without ``rel``, then the first one.
    """
    if not links:
        return ""
    if len(links) == 1:
        return _link_target(links[0])
    for link in links:
        if link.attr("rel") == "alternate":
            return _link_target(link)
    for link in links:
        if not link.attr("rel"):
            return _link_target(link)
    return _link_target(links[0])


def _item_url(item: FeedNode) -> str:
    url = resolve_link(item.all("link"))
    if url:
        return url
    guid = item.first("guid") or item.first("id")
    if guid is not None and _is_http_url(guid.text):
        return guid.text
    return ""


def _item_description(item: FeedNode) -> str:
    for name in DESCRIPTION_FIELDS:
        for node in item.all(name):
            # media:content shares the local name "content"
            if name == "content" and node.attr("url"):
                continue
            if node.text:
                return node.text
    return ""


def _item_date(item: FeedNode) -> str:
    for name in DATE_FIELDS:
        node = item.first(name)
        if node is not None and node.text:
            return node.text
    return datetime.now(timezone.utc).isoformat()


def normalize_item(item: FeedNode, source: str, channel_image: Optional[str] = None) -> Optional[Article]:
    """Build an Article from ``item`` or return ``None`` if it has no title or link."""
    title_node = item.first("title")
    title = clean_text(title_node.text) if title_node is not None else ""
    url = _item_url(item)
    if not title or not url:
        logger.debug("Skipping %s item without title or link", source)
        return None
    if not _is_http_url(url):
        logger.debug("Skipping %s item with non-http link %r", source, url)
        return None

    description = clean_description(_item_description(item)) or NO_DESCRIPTION
    image_url = extract_image(item, source, article_url=url, channel_image=channel_image)

    return Article(
        id=generate_article_id(source, url),
        title=title,
        description=description,
        url=url,
        source=source,
        published_date=_item_date(item),
        image_url=image_url or None,
    )


__all__ = ["NO_DESCRIPTION", "generate_article_id", "normalize_item", "resolve_link"]
