"""JSON-file store for articles the user saved for offline reading.

Each call reads and rewrites the whole file; callers must serialize
concurrent save/remove calls themselves.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Set

from .dates import recency_key
from .models import Article, SavedArticle

logger = logging.getLogger(__name__)


class SavedArticleStore:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> List[SavedArticle]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not load saved articles from %s: %s", self.path, exc)
            return []
        if not isinstance(data, list):
            logger.warning("Saved article store %s is not a list, ignoring contents", self.path)
            return []
        return [SavedArticle.from_dict(entry) for entry in data if isinstance(entry, dict) and entry.get("id")]

    def _write(self, articles: List[SavedArticle]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump([article.to_dict() for article in articles], handle, indent=2, ensure_ascii=False)

    def list(self) -> List[SavedArticle]:
        """Saved articles, most recently saved first."""
        return sorted(self._load(), key=lambda article: recency_key(article.saved_at))

    def save(self, article: Article) -> bool:
        """Persist ``article``; ``False`` if an article with its id is already saved."""
        saved = self._load()
        if any(existing.id == article.id for existing in saved):
            return False
        saved_at = datetime.now(timezone.utc).isoformat()
        saved.append(SavedArticle.from_article(article, saved_at))
        self._write(saved)
        return True

    def remove(self, article_id: str) -> bool:
        saved = self._load()
        remaining = [article for article in saved if article.id != article_id]
        if len(remaining) == len(saved):
            return False
        self._write(remaining)
        return True

    def is_saved(self, article_id: str) -> bool:
        return article_id in self.contains_ids()

    def contains_ids(self) -> Set[str]:
        return {article.id for article in self._load()}


__all__ = ["SavedArticleStore"]
