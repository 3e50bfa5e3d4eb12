#!/usr/bin/env python3
"""Feed ingestion worker.

Fetches every feed listed in UNIFEED_FEED_URLS (comma separated), parses it
into the universal model and prints one JSON summary line per feed. A feed
that fails to fetch or parse is logged and skipped.

UNIFEED_WORKER_MODE=scheduled keeps polling every UNIFEED_POLL_MINUTES
minutes (default 30); anything else runs a single cycle.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Dict, List, Optional

import requests
import schedule
from dotenv import load_dotenv

from unifeed.core.errors import FeedError
from unifeed.core.options import ParseOptions, RequestOptions
from unifeed.universal.parser import Parser

logger = logging.getLogger("feed_ingest_worker")


def feed_urls(env: Optional[Dict[str, str]] = None) -> List[str]:
    env = os.environ if env is None else env
    raw = env.get("UNIFEED_FEED_URLS") or ""
    return [u.strip() for u in raw.split(",") if u.strip()]


def summarize(url: str, feed) -> Dict[str, object]:
    dated = [i for i in feed.sorted_items() if i.published_parsed is not None]
    newest = dated[-1] if dated else None
    return {
        "url": url,
        "feed_type": feed.feed_type,
        "feed_version": feed.feed_version,
        "title": feed.title,
        "items": len(feed.items),
        "newest_item": newest.title if newest else None,
        "newest_published": newest.published_parsed.isoformat() if newest else None,
    }


def run_once(parser: Optional[Parser] = None) -> int:
    """Ingest every configured feed once; returns the number of feeds that failed."""
    parser = parser or Parser()
    options = ParseOptions.from_env()
    request_options = RequestOptions.from_env()
    failures = 0
    urls = feed_urls()
    if not urls:
        logger.warning("UNIFEED_FEED_URLS is empty, nothing to ingest")
        return 0
    for url in urls:
        try:
            feed = parser.parse_url(url, options, request_options)
        except (FeedError, requests.RequestException) as e:
            failures += 1
            logger.warning("skipping %s: %s", url, e)
            continue
        summary = summarize(url, feed)
        logger.info("ingested %s (%s, %d items)", url, feed.feed_type, len(feed.items))
        print(json.dumps(summary, ensure_ascii=False))
    logger.info("ingest cycle done: %d feeds, %d failed", len(urls), failures)
    return failures


def run_scheduled(minutes: int) -> None:
    parser = Parser()
    schedule.every(minutes).minutes.do(run_once, parser)
    run_once(parser)
    while True:
        schedule.run_pending()
        time.sleep(5)


def main() -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    mode = (os.environ.get("UNIFEED_WORKER_MODE") or "once").lower().strip()
    if mode in ("scheduled", "daemon"):
        try:
            minutes = max(1, int(os.environ.get("UNIFEED_POLL_MINUTES", "30")))
        except ValueError:
            minutes = 30
        run_scheduled(minutes)
        return 0
    return 1 if run_once() else 0


if __name__ == "__main__":
    raise SystemExit(main())
