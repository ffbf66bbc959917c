"""Long-running worker that ingests all feeds on a fixed interval.

Usage:
    python scripts/worker.py

Environment Variables:
    DATABASE_URL: Database connection string (defaults to local SQLite)
    ZEITUNG_FEEDS_CONFIG_PATH: Feeds YAML/JSON file
    ZEITUNG_INGEST_INTERVAL_MINUTES: Minutes between runs (default 5)
    ZEITUNG_TAGGING_STRATEGY: feed_based, mock or llm
    ZEITUNG_CI_MODE: Start without scheduling any work
"""

import os
import sys
import asyncio
import signal
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from zeitung.config.settings import settings
from zeitung.config.feeds import load_feeds
from zeitung.ingestion.expander import expand_feeds
from zeitung.pipeline.ingest import run_ingestion

logger = structlog.get_logger()


class IngestWorker:
    """Schedules ingestion runs. Runs never overlap."""

    def __init__(self, interval_minutes: int = None):
        self.interval_minutes = interval_minutes or settings.ingest_interval_minutes
        self.scheduler = AsyncIOScheduler()
        self.cancel_event = asyncio.Event()
        self.running = True
        self.feeds = []

    def setup_jobs(self):
        """Configure the ingestion job, first run immediately."""
        self.scheduler.add_job(
            self.ingest,
            IntervalTrigger(minutes=self.interval_minutes),
            id='ingest_feeds',
            name='Ingest configured feeds',
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now()
        )
        logger.info("jobs_configured", count=len(self.scheduler.get_jobs()),
                    interval_minutes=self.interval_minutes)

    async def ingest(self):
        """Run one ingestion over every feed."""
        logger.info("job_started", job="ingest_feeds")
        start_time = datetime.now()

        try:
            stats = await run_ingestion(self.cancel_event, feeds=self.feeds)
            elapsed = (datetime.now() - start_time).total_seconds()
            logger.info("job_completed", job="ingest_feeds",
                        feeds_failed=stats.feeds_failed,
                        new_articles=stats.articles_created,
                        elapsed_seconds=elapsed)
            return stats.to_dict()

        except Exception as e:
            logger.error("job_failed", job="ingest_feeds", error=str(e))
            return {"error": str(e)}

    def start(self):
        """Start the worker, or idle when there is nothing to schedule."""
        if settings.ci_mode:
            logger.info("worker_started", mode="ci_idle")
            return

        self.feeds = expand_feeds(load_feeds())
        if not self.feeds:
            logger.warning("worker_started", mode="idle", reason="no feeds configured")
            return

        self.setup_jobs()
        self.scheduler.start()
        logger.info("worker_started", mode="scheduler", feeds=len(self.feeds))

    def stop(self):
        """Stop the worker gracefully."""
        self.running = False
        self.cancel_event.set()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("worker_stopped")


async def main():
    """Main entry point."""
    worker = IngestWorker()

    # Handle graceful shutdown
    def signal_handler(signum, frame):
        logger.info("shutdown_signal_received", signal=signum)
        worker.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    worker.start()

    # Keep running
    try:
        while worker.running:
            await asyncio.sleep(1)
    except (KeyboardInterrupt, SystemExit):
        pass

    if worker.running:
        worker.stop()


if __name__ == "__main__":
    asyncio.run(main())
