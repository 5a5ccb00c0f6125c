"""Configuration helpers for threatfeed.

Sources and proxies are static: they are read once (defaults, optionally
overridden by a JSON file) and handed to the aggregator.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Tuple

from .models import NewsSource

CONFIG_FILENAME = "threatfeed_config.json"
CONFIG_ENV_VAR = "THREATFEED_CONFIG"

DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_ITEMS = 20
DEFAULT_SAVED_ARTICLES_PATH = "saved_articles.json"

DEFAULT_SOURCES: Tuple[NewsSource, ...] = (
    NewsSource("The Hacker News", "https://feeds.feedburner.com/TheHackersNews"),
    NewsSource("Threatpost", "https://threatpost.com/feed/"),
    NewsSource("Security Affairs", "https://securityaffairs.com/feed"),
    NewsSource("InfoSec Magazine", "https://www.infosecurity-magazine.com/rss/news/"),
    NewsSource("Bleeping Computer", "https://www.bleepingcomputer.com/feed/"),
)

DEFAULT_PROXIES: Tuple[str, ...] = (
    "https://api.allorigins.win/raw?url=",
    "https://corsproxy.io/?",
    "https://api.codetabs.com/v1/proxy?quest=",
)


class ConfigurationError(RuntimeError):
    """Raised when configuration data cannot be loaded."""


@dataclass(frozen=True)
class FeedConfig:
    sources: Tuple[NewsSource, ...] = DEFAULT_SOURCES
    proxies: Tuple[str, ...] = DEFAULT_PROXIES
    timeout: float = DEFAULT_TIMEOUT
    max_items_per_feed: int = DEFAULT_MAX_ITEMS
    saved_articles_path: Path = field(default_factory=lambda: Path(DEFAULT_SAVED_ARTICLES_PATH))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sources": [{"name": source.name, "url": source.url} for source in self.sources],
            "proxies": list(self.proxies),
            "timeout": self.timeout,
            "max_items_per_feed": self.max_items_per_feed,
            "saved_articles_path": str(self.saved_articles_path),
        }


DEFAULT_CONFIG = FeedConfig()


def _resolve_config_path(path: str | Path | None = None) -> Path:
    env_override = os.getenv(CONFIG_ENV_VAR)
    if path is not None:
        return Path(path).expanduser()
    if env_override:
        return Path(env_override).expanduser()
    return Path(CONFIG_FILENAME)


def _parse_sources(value: Any) -> Tuple[NewsSource, ...]:
    if isinstance(value, dict):
        items = value.items()
    elif isinstance(value, list):
        items = ((entry.get("name"), entry) for entry in value if isinstance(entry, dict))
    else:
        raise ConfigurationError("'sources' must be an object or a list of {name, url} objects.")

    sources = []
    for name, entry in items:
        url = entry.get("url") if isinstance(entry, dict) else entry
        if not name or not isinstance(url, str) or not url.strip():
            raise ConfigurationError(f"Source entry {name!r} is missing a URL.")
        sources.append(NewsSource(str(name).strip(), url.strip()))
    if not sources:
        raise ConfigurationError("At least one source must be configured.")
    return tuple(sources)


def config_from_dict(data: Dict[str, Any]) -> FeedConfig:
    overrides: Dict[str, Any] = {}
    if "sources" in data:
        overrides["sources"] = _parse_sources(data["sources"])
    if "proxies" in data:
        proxies = data["proxies"]
        if not isinstance(proxies, list) or not all(isinstance(p, str) for p in proxies):
            raise ConfigurationError("'proxies' must be a list of URL templates.")
        overrides["proxies"] = tuple(proxies)
    try:
        if "timeout" in data:
            overrides["timeout"] = float(data["timeout"])
        if "max_items_per_feed" in data:
            overrides["max_items_per_feed"] = int(data["max_items_per_feed"])
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc
    if data.get("saved_articles_path"):
        overrides["saved_articles_path"] = Path(data["saved_articles_path"]).expanduser()
    return replace(DEFAULT_CONFIG, **overrides)


def load_config(path: str | Path | None = None) -> FeedConfig:
    """Load configuration, falling back to the built-in defaults.

    An explicitly requested file (argument or environment variable) must
    exist; the default ``threatfeed_config.json`` is optional.
    """
    explicit = path is not None or bool(os.getenv(CONFIG_ENV_VAR))
    config_path = _resolve_config_path(path)
    if not config_path.exists():
        if explicit:
            raise ConfigurationError(f"Configuration file not found at {config_path}.")
        return DEFAULT_CONFIG
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Configuration file {config_path} is not valid JSON.") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a JSON object.")
    return config_from_dict(data)


def save_config(config: FeedConfig, path: str | Path | None = None) -> Path:
    config_path = _resolve_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as handle:
        json.dump(config.to_dict(), handle, indent=2)
    return config_path


__all__ = [
    "CONFIG_FILENAME",
    "ConfigurationError",
    "DEFAULT_CONFIG",
    "DEFAULT_PROXIES",
    "DEFAULT_SOURCES",
    "DEFAULT_TIMEOUT",
    "FeedConfig",
    "config_from_dict",
    "load_config",
    "save_config",
]
