"""Best-effort parsing of feed publication dates for ordering."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from dateutil.parser import parse as parse_date

# Timezone abbreviations common in RSS pubDate values
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}


def parse_published(value: str) -> Optional[datetime]:
    """Parse an RFC 822 / ISO 8601-ish date; ``None`` when it cannot be read."""
    if not value or not value.strip():
        return None
    try:
        dt = parse_date(value.strip(), tzinfos=TZINFOS)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def recency_key(value: str) -> Tuple[int, float]:
    """Sort key putting newer dates first and unreadable dates last."""
    dt = parse_published(value)
    if dt is None:
        return (1, 0.0)
    return (0, -dt.timestamp())


__all__ = ["TZINFOS", "parse_published", "recency_key"]
