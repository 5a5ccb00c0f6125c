"""Image discovery inside HTML fragments taken from feed bodies.

Every helper takes the raw fragment plus the base URL used to resolve
relative references and returns an already-normalized URL or ``None``.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from .urls import is_wordpress_url, normalize_image_url

MIN_IMAGE_SIZE = 200
# Size-suffixed WordPress uploads smaller than this are swapped for the original.
FULL_SIZE_THRESHOLD = 600

SKIP_HINTS = ("avatar", "icon", "logo", "thumbnail")

LAZY_ATTRIBUTES = ("data-src", "data-lazy-src", "data-original")

META_IMAGE_KEYS = (
    ("property", "og:image"),
    ("name", "twitter:image"),
    ("property", "og:image:secure_url"),
    ("name", "image"),
)

_DIMENSION_RE = re.compile(r"^\s*(\d+)")
_DESCRIPTOR_RE = re.compile(r"(\d+)")
_WP_SIZE_RE = re.compile(r"-(\d+)x(\d+)\.(jpg|jpeg|png|gif|webp)", re.IGNORECASE)
_BARE_IMAGE_URL_RE = re.compile(r"https?://[^\s<>\"']+\.(?:jpg|jpeg|png|gif|webp)(?:\?[^\s<>\"']*)?", re.IGNORECASE)
_TINY_SIZE_RE = re.compile(r"-\d{1,2}x\d{1,2}\.")


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _attr_text(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return (value or "").strip()


def _dimension(tag: Tag, name: str) -> Optional[int]:
    match = _DIMENSION_RE.match(_attr_text(tag, name))
    return int(match.group(1)) if match else None


def _is_small(tag: Tag) -> bool:
    width = _dimension(tag, "width")
    height = _dimension(tag, "height")
    if width is None or height is None:
        return False
    return width < MIN_IMAGE_SIZE and height < MIN_IMAGE_SIZE


def _is_decorative(tag: Tag) -> bool:
    hints = f"{_attr_text(tag, 'alt')} {_attr_text(tag, 'class')}".lower()
    return any(hint in hints for hint in SKIP_HINTS)


def pick_from_srcset(srcset: str, default: str) -> str:
    """Largest labelled candidate of a ``srcset``, else one without resize hints."""
    best_url = default
    best_size = 0
    for entry in srcset.split(","):
        parts = entry.strip().split()
        if not parts or not parts[0].startswith(("http", "//")):
            continue
        url = parts[0]
        if len(parts) > 1:
            match = _DESCRIPTOR_RE.search(parts[1])
            if match and int(match.group(1)) > best_size:
                best_size = int(match.group(1))
                best_url = url
        elif "resize=" not in url and "w=" not in url:
            best_url = url
    return best_url


def full_size_wordpress_url(url: str) -> str:
    """Drop a ``-WIDTHxHEIGHT`` suffix from small WordPress upload variants."""
    if not is_wordpress_url(url):
        return url
    match = _WP_SIZE_RE.search(url)
    if match and (int(match.group(1)) >= FULL_SIZE_THRESHOLD or int(match.group(2)) >= FULL_SIZE_THRESHOLD):
        return url
    return _WP_SIZE_RE.sub(r".\3", url, count=1)


def _first_normalized(candidates: Iterable[str], base_url: Optional[str]) -> Optional[str]:
    for candidate in candidates:
        normalized = normalize_image_url(candidate, base_url)
        if normalized:
            return normalized
    return None


def find_substantial_image(html: str, base_url: Optional[str] = None) -> Optional[str]:
    """First ``<img>`` that is neither tiny nor decorative.

    Falls back to the first ``<img>`` of the fragment when every image was
    filtered out.
    """
    if not html:
        return None
    images = [img for img in _soup(html).find_all("img") if _attr_text(img, "src")]
    if not images:
        return None

    for img in images:
        if _is_small(img) or _is_decorative(img):
            continue
        src = _attr_text(img, "src")
        srcset = _attr_text(img, "srcset")
        if srcset:
            src = pick_from_srcset(srcset, src)
        if is_wordpress_url(src):
            src = src.replace("%2C", ",").replace("%2F", "/")
        normalized = normalize_image_url(src, base_url)
        if normalized:
            return normalized

    return normalize_image_url(full_size_wordpress_url(_attr_text(images[0], "src")), base_url)


def find_lazy_image(html: str, base_url: Optional[str] = None) -> Optional[str]:
    if not html:
        return None
    soup = _soup(html)
    for attribute in LAZY_ATTRIBUTES:
        candidates = [
            full_size_wordpress_url(_attr_text(tag, attribute))
            for tag in soup.find_all(attrs={attribute: True})
            if _attr_text(tag, attribute)
        ]
        normalized = _first_normalized(candidates, base_url)
        if normalized:
            return normalized
    return None


def find_bare_image_url(text: str, base_url: Optional[str] = None) -> Optional[str]:
    """Image URL written directly into the body, skipping thumbnail names."""
    if not text:
        return None
    matches: List[str] = [match.group(0) for match in _BARE_IMAGE_URL_RE.finditer(text)]
    if not matches:
        return None
    preferred = [url for url in matches if "thumb" not in url and not _TINY_SIZE_RE.search(url)]
    return _first_normalized(preferred, base_url) or normalize_image_url(matches[0], base_url)


def find_meta_image(html: str, base_url: Optional[str] = None) -> Optional[str]:
    """Open Graph / Twitter Card image declared in ``<meta>`` tags."""
    if not html or "<meta" not in html.lower():
        return None
    soup = _soup(html)
    for key, value in META_IMAGE_KEYS:
        for tag in soup.find_all("meta", attrs={key: value}):
            normalized = normalize_image_url(_attr_text(tag, "content"), base_url)
            if normalized:
                return normalized
    return None


__all__ = [
    "find_bare_image_url",
    "find_lazy_image",
    "find_meta_image",
    "find_substantial_image",
    "full_size_wordpress_url",
    "pick_from_srcset",
]
