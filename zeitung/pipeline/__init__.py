"""Pipeline orchestration - scheduled and one-shot ingestion runs."""

from .ingest import FeedIngestPipeline, IngestionStats, create_pipeline, run_ingestion

__all__ = ["FeedIngestPipeline", "IngestionStats", "create_pipeline", "run_ingestion"]
