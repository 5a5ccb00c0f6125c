"""Representative image selection for a feed item."""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from . import markup
from .tree import FeedDocument, FeedFormat, FeedNode
from .urls import is_likely_image_url, normalize_image_url

logger = logging.getLogger(__name__)

BODY_FIELDS = ("encoded", "content", "description", "summary")

_LEADING_DIGITS_RE = re.compile(r"^\s*(\d+)")


def _int_attr(node: FeedNode, name: str) -> int:
    match = _LEADING_DIGITS_RE.match(node.attr(name))
    return int(match.group(1)) if match else 0


def _node_url(node: FeedNode, *attributes: str) -> str:
    return node.attr(*attributes) or node.text


def _is_image_candidate(url: str, mime_type: str) -> bool:
    return bool(url) and (mime_type.startswith("image/") or is_likely_image_url(url))


def _is_media_content(node: FeedNode) -> bool:
    # media:content always carries url=; Atom <content> never does
    return bool(node.attr("url"))


def item_body(item: FeedNode) -> str:
    """First non-empty HTML body of the item, in feed-preference order."""
    for name in BODY_FIELDS:
        for node in item.all(name):
            if name == "content" and _is_media_content(node):
                continue
            if node.text:
                return node.text
    return ""


def _from_enclosure(item: FeedNode, base_url: Optional[str]) -> Optional[str]:
    enclosure = item.first("enclosure")
    if enclosure is None:
        return None
    url = enclosure.attr("url")
    if url and enclosure.attr("type").startswith("image/"):
        return normalize_image_url(url, base_url)
    return None


def _from_thumbnail(item: FeedNode, base_url: Optional[str]) -> Optional[str]:
    thumbnail = item.first("thumbnail")
    if thumbnail is None:
        return None
    return normalize_image_url(_node_url(thumbnail, "url"), base_url)


def rank_media_contents(nodes: List[FeedNode], use_keywords: bool = True) -> List[str]:
    """Order media:content URLs best-first.

    Keyword hints rank ``full`` above ``large`` above entries that declare
    dimensions; ties go to the larger pixel area.
    """
    ranked: List[Tuple[int, int, int, str]] = []
    for position, node in enumerate(nodes):
        url = node.attr("url", "href")
        if not _is_image_candidate(url, node.attr("type")):
            continue
        area = _int_attr(node, "width") * _int_attr(node, "height")
        priority = 0
        if use_keywords:
            keywords_node = node.first("keywords")
            keywords = (keywords_node.text if keywords_node is not None else node.attr("keywords")).lower()
            if "full" in keywords:
                priority = 1
            elif "large" in keywords:
                priority = 2
            elif area > 0:
                priority = 3
            else:
                priority = 4
        ranked.append((priority, -area, position, url))
    ranked.sort()
    return [url for _, _, _, url in ranked]


def _from_media_content(item: FeedNode, base_url: Optional[str]) -> Optional[str]:
    ranked = rank_media_contents([node for node in item.all("content") if _is_media_content(node)])
    if not ranked:
        return None
    return normalize_image_url(ranked[0], base_url)


def _from_itunes_image(item: FeedNode, base_url: Optional[str]) -> Optional[str]:
    image = item.first("image")
    if image is None:
        return None
    return normalize_image_url(_node_url(image, "href"), base_url)


def _from_media_group(item: FeedNode, base_url: Optional[str]) -> Optional[str]:
    group = item.first("group")
    if group is None:
        return None
    for name in ("thumbnail", "thumbnails"):
        thumbnail = group.first(name)
        if thumbnail is None:
            continue
        url = _node_url(thumbnail, "url", "href")
        if url:
            normalized = normalize_image_url(url, base_url)
            if normalized:
                return normalized
    contents = group.all("content") + group.all("contents")
    ranked = rank_media_contents(contents, use_keywords=False)
    if not ranked:
        return None
    return normalize_image_url(ranked[0], base_url)


def channel_image(document: FeedDocument) -> Optional[str]:
    """Feed-level artwork used when an item carries no image of its own."""
    channel = document.channel
    if document.format is FeedFormat.ATOM:
        for name in ("icon", "logo"):
            node = channel.first(name)
            if node is not None and node.text:
                return node.text
        return None
    for image in channel.all("image"):
        url_node = image.first("url")
        if url_node is not None and url_node.text:
            return url_node.text
        if image.attr("href"):
            return image.attr("href")
    return None


def extract_image(
    item: FeedNode,
    source: str,
    article_url: Optional[str] = None,
    channel_image: Optional[str] = None,
) -> str:
    """Best image URL for ``item``, or ``""`` when the feed offers none."""
    base_url = article_url or None

    found = _from_enclosure(item, base_url)
    if found:
        return found

    body = item_body(item)
    if body:
        found = (
            markup.find_substantial_image(body, base_url)
            or markup.find_lazy_image(body, base_url)
            or markup.find_bare_image_url(body, base_url)
        )
        if found:
            return found

    for strategy in (_from_thumbnail, _from_media_content, _from_itunes_image, _from_media_group):
        found = strategy(item, base_url)
        if found:
            return found

    if body:
        found = markup.find_meta_image(body, base_url)
        if found:
            return found

    if channel_image:
        found = normalize_image_url(channel_image, base_url)
        if found:
            return found

    logger.debug("No image found for item from %s", source)
    return ""


__all__ = ["channel_image", "extract_image", "item_body", "rank_media_contents"]
