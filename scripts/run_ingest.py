#!/usr/bin/env python3
"""Run one ingestion over all configured feeds.

Usage:
    python scripts/run_ingest.py               # ingest once, exit 0 on success
    python scripts/run_ingest.py --migrate     # create the database schema and exit
    python scripts/run_ingest.py --feeds config/feeds.yaml
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog

from zeitung.config.feeds import load_feeds
from zeitung.ingestion.expander import expand_feeds
from zeitung.pipeline.ingest import run_ingestion
from zeitung.storage.factory import get_database_url
from zeitung.storage.database import create_engine_for

logger = structlog.get_logger()


def migrate() -> None:
    url = get_database_url()
    create_engine_for(url)
    logger.info("database_migrated", url=url[:40] + "...")


def main() -> int:
    parser = argparse.ArgumentParser(description="Ingest configured news feeds once")
    parser.add_argument("--migrate", action="store_true", help="Create database tables and exit")
    parser.add_argument("--feeds", help="Path to the feeds YAML/JSON file")
    args = parser.parse_args()

    try:
        if args.migrate:
            migrate()
            return 0

        feeds = expand_feeds(load_feeds(args.feeds))
        stats = asyncio.run(run_ingestion(feeds=feeds))
    except Exception as e:
        logger.error("ingestion_run_failed", error=str(e))
        return 1

    print("\nRESULTS:")
    print(f"  Feeds: {stats.feeds_processed} processed, {stats.feeds_failed} failed")
    print(f"  Articles: {stats.articles_seen} seen, {stats.articles_created} new\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
