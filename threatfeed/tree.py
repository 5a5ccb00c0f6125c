"""Generic element tree for syndication documents.

Feeds are parsed with BeautifulSoup's XML builder and converted into small
immutable :class:`FeedNode` objects addressed by *local* name, so
``media:content``, ``dc:date`` and ``content:encoded`` are reachable as
``content``, ``date`` and ``encoded``. ``media:content`` and Atom
``<content>`` share a local name; the former always carries a ``url``
attribute, which is how callers tell them apart.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from html import escape
from typing import Iterator, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import CData, PreformattedString


@dataclass(frozen=True)
class FeedNode:
    name: str
    attrs: Tuple[Tuple[str, str], ...] = ()
    contents: Tuple[Union[str, "FeedNode"], ...] = field(default=())

    @property
    def children(self) -> List["FeedNode"]:
        return [part for part in self.contents if isinstance(part, FeedNode)]

    def attr(self, *names: str) -> str:
        """First non-empty attribute among ``names`` (local names), else ``""``."""
        lookup = dict(self.attrs)
        for name in names:
            value = lookup.get(name)
            if value:
                return value
        return ""

    def first(self, name: str) -> Optional["FeedNode"]:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def all(self, name: str) -> List["FeedNode"]:
        return [child for child in self.children if child.name == name]

    def path(self, *names: str) -> Optional["FeedNode"]:
        node: Optional[FeedNode] = self
        for name in names:
            if node is None:
                return None
            node = node.first(name)
        return node

    @property
    def text(self) -> str:
        """Text of a leaf element, or the serialized inner markup of a mixed one."""
        if not self.children:
            return "".join(part for part in self.contents if isinstance(part, str)).strip()
        return self.markup().strip()

    def markup(self) -> str:
        return "".join(_render(part) for part in self.contents)


def _render(part: Union[str, FeedNode]) -> str:
    if isinstance(part, str):
        return escape(part, quote=False)
    attrs = "".join(f' {key}="{escape(value)}"' for key, value in part.attrs)
    if not part.contents:
        return f"<{part.name}{attrs}/>"
    return f"<{part.name}{attrs}>{part.markup()}</{part.name}>"


def _local_name(name: str) -> str:
    return name.rsplit(":", 1)[-1]


def _convert(tag: Tag) -> FeedNode:
    attrs = []
    for key, value in tag.attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        attrs.append((_local_name(str(key)), str(value)))
    contents: List[Union[str, FeedNode]] = []
    for child in tag.children:
        if isinstance(child, Tag):
            contents.append(_convert(child))
        elif isinstance(child, CData) or (
            isinstance(child, NavigableString) and not isinstance(child, PreformattedString)
        ):
            contents.append(str(child))
    return FeedNode(name=_local_name(tag.name), attrs=tuple(attrs), contents=tuple(contents))


def parse_xml(xml_text: str) -> Optional[FeedNode]:
    """Parse ``xml_text`` into a tree, returning the root element or ``None``."""
    if not xml_text or not xml_text.strip():
        return None
    soup = BeautifulSoup(xml_text, "xml")
    root = next((child for child in soup.children if isinstance(child, Tag)), None)
    if root is None:
        return None
    return _convert(root)


class FeedFormat(enum.Enum):
    RSS2 = "rss"
    ATOM = "atom"
    RDF = "rdf"


@dataclass(frozen=True)
class FeedDocument:
    """One of the three supported feed shapes with its item list."""

    format: FeedFormat
    channel: FeedNode
    items: Tuple[FeedNode, ...]

    def __iter__(self) -> Iterator[FeedNode]:
        return iter(self.items)


def detect_feed(root: Optional[FeedNode]) -> Optional[FeedDocument]:
    """Classify ``root`` as RSS 2.0, Atom or RDF, in that order of preference."""
    if root is None:
        return None
    if root.name == "rss":
        channel = root.first("channel")
        if channel is not None and channel.first("item") is not None:
            return FeedDocument(FeedFormat.RSS2, channel, tuple(channel.all("item")))
    if root.name == "feed" and root.first("entry") is not None:
        return FeedDocument(FeedFormat.ATOM, root, tuple(root.all("entry")))
    if root.name == "RDF" and root.first("item") is not None:
        channel = root.first("channel") or root
        return FeedDocument(FeedFormat.RDF, channel, tuple(root.all("item")))
    return None


__all__ = ["FeedDocument", "FeedFormat", "FeedNode", "detect_feed", "parse_xml"]
