"""Application settings with environment variable support."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path


# Project root, used for default paths
_BASE_DIR = Path(__file__).parent.parent.parent.resolve()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ZEITUNG_",  # ZEITUNG_DATABASE_URL, ZEITUNG_LLM_API_KEY, etc.
    )

    # Paths
    feeds_config_path: Path = _BASE_DIR / "config" / "feeds.yaml"

    # Database
    database_url: str = f"sqlite:///{_BASE_DIR / 'data' / 'zeitung.db'}"

    # Tagging
    tagging_strategy: str = "feed_based"  # "feed_based", "mock", or "llm"
    co_occurrence_idempotent: bool = False

    # LLM (OpenAI-compatible endpoint, OpenRouter by default)
    llm_provider: str = "openai"  # "openai" or "anthropic"
    llm_api_key: Optional[str] = None
    llm_base_url: Optional[str] = "https://openrouter.ai/api/v1"
    llm_model: str = "meta-llama/llama-3.1-8b-instruct:free"
    llm_max_tokens: int = 500
    llm_temperature: float = 0.0
    llm_include_existing_tags: bool = False
    llm_minimum_tag_probability: float = 0.7

    # Ingestion
    fetch_timeout_seconds: int = 30
    user_agent: str = "ZeitungBot/1.0"
    ingest_interval_minutes: int = 5

    # Search index (optional)
    search_index_url: Optional[str] = None
    search_index_name: str = "articles"

    # Worker
    ci_mode: bool = False


settings = Settings()
