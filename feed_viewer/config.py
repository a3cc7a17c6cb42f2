"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── MongoDB (written by the ranking / re-ranking producers) ────────────
    mongodb_uri: str = "mongodb://mongo:27017"
    mongodb_db: str = "ranking-algorithm"
    mongodb_server_selection_timeout_ms: int = 5000

    feed_samples_collection: str = "feed_samples"
    ranked_feeds_collection: str = "ranked_feeds"
    reranked_feeds_collection: str = "reranked_feeds"
    images_collection: str = "images"
    users_collection: str = "users"

    # ── Views ──────────────────────────────────────────────────────────────
    default_n_cols: int = 5              # re-ranked layout variant when none given
    sample_index_limit: int = 50         # rows on the sample index

    # ── Enrichment ─────────────────────────────────────────────────────────
    enrichment_concurrency: int = 32     # in-flight image lookups per request
    content_lookup_timeout: float = 2.0  # seconds per image lookup

    # ── Observability ──────────────────────────────────────────────────────
    tracing_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    service_name: str = "feed-viewer"
    environment: str = "development"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
