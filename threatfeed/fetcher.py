"""HTTP retrieval of feed documents with CORS-proxy fallback."""
from __future__ import annotations

import json
import logging
import time
from typing import Optional, Sequence
from urllib.parse import quote

import requests

from .config import DEFAULT_PROXIES, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

PROXY_EXTRA_TIMEOUT = 5.0

FEED_PREAMBLES = ("<?xml", "<rss", "<feed", "<rdf")
# Weaker markers accepted from proxies that re-wrap or re-serialize the body.
PROXY_FEED_MARKERS = ("<channel>", "<entry>")

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "application/rss+xml, application/xml, text/xml, */*",
    "Accept-Language": "en-US,en;q=0.9",
}

CHUNK_SIZE = 16 * 1024


class FetchError(Exception):
    """Raised when neither the direct request nor any proxy produced a feed."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url


class NotAFeedError(ValueError):
    """A successful response whose body does not look like a feed document."""


def looks_like_feed(text: str, lenient: bool = False) -> bool:
    trimmed = text.strip()
    if trimmed.lower().startswith(FEED_PREAMBLES):
        return True
    return lenient and any(marker in trimmed for marker in PROXY_FEED_MARKERS)


def unwrap_proxy_payload(text: str) -> str:
    """Return the feed from ``{"contents": ...}`` / ``{"data": ...}`` envelopes."""
    try:
        payload = json.loads(text)
    except ValueError:
        return text
    if isinstance(payload, dict):
        for key in ("contents", "data"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return text


def build_proxy_url(template: str, target: str) -> str:
    encoded = quote(target, safe="")
    if "{url}" in template:
        return template.replace("{url}", encoded)
    return f"{template}{encoded}"


def read_body(resp: requests.Response, deadline: float) -> bytes:
    """Read a streamed body, giving up once the monotonic ``deadline`` passes."""
    chunks = []
    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
        if time.monotonic() > deadline:
            raise requests.Timeout(f"Transfer from {resp.url} exceeded its time limit")
        chunks.append(chunk)
    return b"".join(chunks)


def decode_body(resp: requests.Response, content: bytes) -> str:
    """Decode using the charset the server declared, else UTF-8, without a BOM."""
    encoding = requests.utils.get_encoding_from_headers(resp.headers)
    # requests assumes ISO-8859-1 for text/* without a charset; feeds default to UTF-8
    if not encoding or "charset" not in resp.headers.get("Content-Type", "").lower():
        encoding = "utf-8"
    try:
        text = content.decode(encoding, errors="replace")
    except LookupError:
        text = content.decode("utf-8", errors="replace")
    return text.lstrip("\ufeff")


class FeedFetcher:
    """Fetches raw feed XML, retrying through relay proxies on network failure.

    A clean non-2xx answer from the origin is final: it means the server was
    reached and refused, which a proxy cannot fix.
    """

    def __init__(
        self,
        proxies: Sequence[str] = DEFAULT_PROXIES,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.proxies = tuple(proxies)
        self.timeout = timeout
        self.sess = session or requests.Session()
        self.sess.headers.update(BROWSER_HEADERS)

    def _get(self, url: str, timeout: float) -> requests.Response:
        return self.sess.get(url, timeout=timeout, allow_redirects=True, stream=True)

    def _fetch_direct(self, url: str, timeout: float) -> str:
        deadline = time.monotonic() + timeout
        with self._get(url, timeout) as response:
            response.raise_for_status()
            text = decode_body(response, read_body(response, deadline))
        if not looks_like_feed(text):
            raise NotAFeedError("Invalid RSS feed format")
        return text

    def _fetch_via_proxy(self, proxy: str, url: str, timeout: float) -> Optional[str]:
        deadline = time.monotonic() + timeout
        with self._get(build_proxy_url(proxy, url), timeout) as response:
            if not response.ok:
                logger.warning("Proxy %s returned HTTP %s for %s", proxy[:30], response.status_code, url)
                return None
            text = unwrap_proxy_payload(decode_body(response, read_body(response, deadline)))
        if looks_like_feed(text, lenient=True):
            return text
        logger.warning("Proxy %s returned a non-feed body for %s", proxy[:30], url)
        return None

    def fetch(self, url: str, timeout: Optional[float] = None) -> str:
        timeout = self.timeout if timeout is None else timeout
        try:
            return self._fetch_direct(url, timeout)
        except requests.HTTPError as exc:
            raise FetchError(url, str(exc)) from exc
        except (requests.RequestException, NotAFeedError) as exc:
            direct_error = exc

        logger.info("Direct fetch failed for %s (%s), trying proxies", url, direct_error)
        for proxy in self.proxies:
            try:
                text = self._fetch_via_proxy(proxy, url, timeout + PROXY_EXTRA_TIMEOUT)
            except requests.RequestException as exc:
                logger.warning("Proxy %s failed for %s: %s", proxy[:30], url, exc)
                continue
            if text is not None:
                logger.info("Fetched %s via proxy %s", url, proxy[:30])
                return text

        raise FetchError(url, str(direct_error)) from direct_error

    def close(self) -> None:
        self.sess.close()


def fetch_feed_document(url: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    fetcher = FeedFetcher(timeout=timeout)
    try:
        return fetcher.fetch(url)
    finally:
        fetcher.close()


__all__ = [
    "FeedFetcher",
    "FetchError",
    "build_proxy_url",
    "fetch_feed_document",
    "looks_like_feed",
    "unwrap_proxy_payload",
]
