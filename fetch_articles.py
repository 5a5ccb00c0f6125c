#!/usr/bin/env python3
"""Fetch the latest cybersecurity articles and export them to JSON."""
from __future__ import annotations

import sys

from threatfeed.cli import main


if __name__ == "__main__":
    args = sys.argv[1:] or ["fetch", "--json", "cybersec_news.json"]
    raise SystemExit(main(args))
