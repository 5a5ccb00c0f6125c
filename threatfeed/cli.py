"""Command line entry point for fetching and managing cybersecurity news."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .aggregator import FeedAggregator, list_source_names
from .config import ConfigurationError, FeedConfig, load_config
from .models import Article
from .storage import SavedArticleStore

logger = logging.getLogger(__name__)


def _common_options() -> argparse.ArgumentParser:
    # SUPPRESS keeps a subcommand from resetting options given before it
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=argparse.SUPPRESS, help="Path to a JSON configuration file.")
    common.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Enable debug logging.")
    common.add_argument(
        "-q", "--quiet", action="store_true", default=argparse.SUPPRESS, help="Only log warnings and errors."
    )
    return common


def build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(prog="threatfeed", description=__doc__, parents=[common])
    commands = parser.add_subparsers(dest="command", required=True)

    fetch = commands.add_parser("fetch", parents=[common], help="Fetch articles from every configured source.")
    fetch.add_argument("--json", dest="json_path", default=None, help="Write the articles to this JSON file.")
    fetch.add_argument("--limit", type=int, default=100, help="Number of articles to print (default: 100).")
    fetch.add_argument(
        "--save",
        action="append",
        default=[],
        metavar="ID",
        help="Save the fetched article with this id (repeatable).",
    )

    commands.add_parser("sources", parents=[common], help="List configured source names.")

    saved = commands.add_parser("saved", parents=[common], help="Manage saved articles.")
    saved_commands = saved.add_subparsers(dest="saved_command", required=True)
    saved_commands.add_parser("list", help="List saved articles.")
    remove = saved_commands.add_parser("remove", help="Remove a saved article.")
    remove.add_argument("article_id")
    return parser


def print_summary(articles: Sequence[Article], limit: int = 100) -> None:
    if not articles:
        print("No articles found!")
        return
    print("\n" + "=" * 80)
    print("CYBERSECURITY NEWS SUMMARY")
    print("=" * 80 + "\n")
    for i, article in enumerate(articles[:limit], 1):
        print(f"{i}. [{article.source}] {article.title}")
        print(f"   {article.url}")
        print(f"   id: {article.id}  published: {article.published_date}")
        if article.description:
            print(f"   {article.description[:150]}...\n")


def save_to_json(articles: Sequence[Article], target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        json.dump([article.to_dict() for article in articles], handle, indent=2, ensure_ascii=False)
    print(f"✓ Saved JSON to {target}")


def _run_fetch(args: argparse.Namespace, config: FeedConfig) -> int:
    aggregator = FeedAggregator(config)
    try:
        articles = aggregator.fetch_all()
    finally:
        aggregator.fetcher.close()

    if args.json_path:
        save_to_json(articles, Path(args.json_path))
    print_summary(articles, limit=args.limit)

    if args.save:
        store = SavedArticleStore(config.saved_articles_path)
        by_id = {article.id: article for article in articles}
        for article_id in args.save:
            article = by_id.get(article_id)
            if article is None:
                print(f"No fetched article with id {article_id}")
            elif store.save(article):
                print(f"✓ Saved {article.title}")
            else:
                print(f"Already saved: {article.title}")
    return 0


def _run_saved(args: argparse.Namespace, config: FeedConfig) -> int:
    store = SavedArticleStore(config.saved_articles_path)
    if args.saved_command == "remove":
        if store.remove(args.article_id):
            print(f"✓ Removed {args.article_id}")
            return 0
        print(f"No saved article with id {args.article_id}")
        return 1

    saved = store.list()
    if not saved:
        print("No saved articles.")
        return 0
    for article in saved:
        print(f"[{article.saved_at}] [{article.source}] {article.title}")
        print(f"   {article.url}  (id: {article.id})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    verbose = getattr(args, "verbose", False)
    quiet = getattr(args, "quiet", False)
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(getattr(args, "config", None))
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 2

    if args.command == "sources":
        for name in list_source_names(config):
            print(name)
        return 0
    if args.command == "saved":
        return _run_saved(args, config)
    return _run_fetch(args, config)


if __name__ == "__main__":
    raise SystemExit(main())
