"""Validation and cleanup of candidate image URLs found in feed items."""
from __future__ import annotations

import re
from typing import Iterable, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from .text import decode_entities

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp", ".ico", ".tiff", ".tif")

IMAGE_HOST_HINTS = (
    "imgur", "cloudinary", "cdn", "images", "image", "photo", "pic",
    "flickr", "unsplash", "pexels", "pixabay", "wp-content", "media",
    "static", "assets", "uploads", "thumbnail", "thumb", "avatar",
)

IMAGE_QUERY_HINTS = ("format=jpg", "format=png", "format=webp", "format=gif", "image", "img", "photo", "picture")

IMAGE_PATH_SEGMENTS = ("/image/", "/img/", "/photo/", "/picture/", "/media/", "/uploads/")

NON_IMAGE_PATH_PATTERNS = ("/feed", "/rss", "/atom", "/api/", "/script")
NON_IMAGE_EXTENSIONS = (".xml", ".json", ".js", ".css", ".html", ".php", ".asp", ".aspx")

# WordPress.com image CDN resize controls
WP_RESIZE_PARAMS = ("resize", "ssl", "w", "h")

TRACKING_PARAMS = (
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "ref",
    "fbclid",
    "gclid",
    "mc_cid",
    "mc_eid",
    "_ga",
    "_gid",
)

_BOUNDARY_RE = re.compile(r"^[,\s]+|[,\s]+$")
_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")
_FILENAME_RE = re.compile(r"/[^/]+\.[a-z]{3,4}(\?|$)")
_WP_SIZE_SUFFIX_RE = re.compile(r"-(\d+)x(\d+)(?=\.(jpg|jpeg|png|gif|webp|svg))", re.IGNORECASE)
_WP_SCALED_SUFFIX_RE = re.compile(r"-scaled(?=\.(jpg|jpeg|png|gif|webp|svg))", re.IGNORECASE)
_HOST_RE = re.compile(r"^[A-Za-z0-9.-]+(:\d+)?$")


def is_likely_image_url(url: str) -> bool:
    """Guess whether ``url`` points at an image.

    Clear negatives (feed, API and script paths) win over the loose host
    hints; URLs carrying a query string are given the benefit of the doubt.
    """
    url_lower = url.lower()
    if any(ext in url_lower for ext in IMAGE_EXTENSIONS):
        return True

    try:
        path = urlsplit(url_lower).path
    except ValueError:
        return False
    if any(pattern in path for pattern in NON_IMAGE_PATH_PATTERNS):
        return False
    if path.endswith(NON_IMAGE_EXTENSIONS):
        return False

    if any(host in url_lower for host in IMAGE_HOST_HINTS):
        return True
    if any(param in url_lower for param in IMAGE_QUERY_HINTS):
        return True
    if any(segment in url_lower for segment in IMAGE_PATH_SEGMENTS):
        return True

    return "?" in url_lower or bool(_FILENAME_RE.search(url_lower))


def is_wordpress_url(url: str) -> bool:
    """True for WordPress.com CDN hosts or self-hosted ``/wp-content/`` paths."""
    try:
        parts = urlsplit(url)
        hostname = parts.hostname or ""
    except ValueError:
        return False
    return hostname.endswith(".wp.com") or "/wp-content/" in parts.path


def _strip_params(query: str, names: Iterable[str]) -> str:
    if not query:
        return query
    drop = set(names)
    pairs = parse_qsl(query, keep_blank_values=True)
    kept = [(key, value) for key, value in pairs if key not in drop]
    if len(kept) == len(pairs):
        return query
    return urlencode(kept)


def _resolve(candidate: str, base_url: Optional[str]) -> Optional[str]:
    if candidate.startswith("//"):
        return f"https:{candidate}"
    if candidate.startswith(("http://", "https://")) or not base_url:
        return candidate

    base = urlsplit(base_url)
    if base.scheme not in ("http", "https") or not base.netloc:
        return None
    if candidate.startswith("/"):
        return f"{base.scheme}://{base.netloc}{candidate}"
    if "/" in candidate:
        return urljoin(base_url, candidate)
    base_dir = base.path[: base.path.rfind("/") + 1] or "/"
    return f"{base.scheme}://{base.netloc}{base_dir}{candidate}"


def _unwrap_wordpress_cdn(parts):
    """Recover the origin URL that i0/i1/i2.wp.com serves from its path."""
    segments = [segment for segment in parts.path.split("/") if segment]
    if len(segments) > 1 and _HOST_RE.match(segments[0]) and "." in segments[0]:
        return ("https", segments[0], "/" + "/".join(segments[1:]), "", "")
    return (parts.scheme, parts.netloc, parts.path, _strip_params(parts.query, WP_RESIZE_PARAMS), "")


def normalize_image_url(candidate, base_url: Optional[str] = None) -> Optional[str]:
    """Return a clean absolute http(s) image URL, or ``None`` if unusable.

    Relative candidates are resolved against ``base_url`` (usually the
    article link). WordPress CDN wrappers, resize parameters, tracking
    parameters and ``-WIDTHxHEIGHT`` upload suffixes are removed so the
    full-size original is returned.
    """
    if not candidate or not isinstance(candidate, str):
        return None

    try:
        clean_url = _BOUNDARY_RE.sub("", candidate.strip())
        clean_url = decode_entities(clean_url)
        clean_url = clean_url.split("#", 1)[0]
        if not clean_url:
            return None

        scheme_match = _SCHEME_RE.match(clean_url)
        if scheme_match and scheme_match.group(1).lower() not in ("http", "https"):
            return None

        clean_url = _resolve(clean_url, base_url)
        if not clean_url:
            return None

        parts = urlsplit(clean_url)
        if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
            return None
        if not is_likely_image_url(clean_url):
            return None

        scheme, netloc, path, query = parts.scheme.lower(), parts.netloc, parts.path, parts.query
        if parts.hostname.lower().endswith(".wp.com"):
            scheme, netloc, path, query, _ = _unwrap_wordpress_cdn(parts)

        query = _strip_params(query, ("resize", "ssl"))
        query = _strip_params(query, TRACKING_PARAMS)

        if "/wp-content/uploads/" in path:
            path = _WP_SIZE_SUFFIX_RE.sub("", path, count=1)
            path = _WP_SCALED_SUFFIX_RE.sub("", path, count=1)

        return urlunsplit((scheme, netloc, path, query, ""))
    except ValueError:
        return None


__all__ = [
    "TRACKING_PARAMS",
    "is_likely_image_url",
    "is_wordpress_url",
    "normalize_image_url",
]
