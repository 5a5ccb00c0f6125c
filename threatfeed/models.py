"""Article records shared by the ingestion pipeline and the saved-article store."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

# JSON record keys, kept compatible with the mobile client's storage format.
_FIELD_TO_KEY = {
    "id": "id",
    "title": "title",
    "description": "description",
    "url": "url",
    "source": "source",
    "published_date": "publishedDate",
    "image_url": "imageUrl",
}


@dataclass(frozen=True)
class NewsSource:
    name: str
    url: str


@dataclass(frozen=True)
class Article:
    """Canonical, source-agnostic article produced by the feed pipeline."""

    id: str
    title: str
    description: str
    url: str
    source: str
    published_date: str
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        record = {}
        for field, key in _FIELD_TO_KEY.items():
            value = getattr(self, field)
            if field == "image_url" and not value:
                continue
            record[key] = value
        return record

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> "Article":
        values = _values_from_record(record)
        return cls(**values)


@dataclass(frozen=True)
class SavedArticle(Article):
    saved_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        record = super().to_dict()
        record["savedAt"] = self.saved_at
        return record

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> "SavedArticle":
        values = _values_from_record(record)
        return cls(saved_at=str(record.get("savedAt") or ""), **values)

    @classmethod
    def from_article(cls, article: Article, saved_at: str) -> "SavedArticle":
        values = {field: getattr(article, field) for field in _FIELD_TO_KEY}
        return cls(saved_at=saved_at, **values)


def _values_from_record(record: Mapping[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for field, key in _FIELD_TO_KEY.items():
        value = record.get(key)
        if value is None:
            value = record.get(field)
        if field == "image_url":
            values[field] = str(value) if value else None
        else:
            values[field] = str(value or "")
    return values


__all__ = ["Article", "NewsSource", "SavedArticle"]
