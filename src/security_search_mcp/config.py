from typing import List, Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Document source (object storage URL takes precedence over a local file)
    document_source_url: Optional[AnyHttpUrl] = None
    document_source_path: Optional[str] = None
    source_timeout_seconds: float = 60.0

    # Snapshot freshness
    cache_ttl_seconds: float = 60.0
    preload_on_startup: bool = True

    # Query limits
    default_query_limit: int = 30
    max_query_limit: int = 1000
    schema_sample_size: int = 100
    snippet_window: int = 200

    # Corrupt date values seen in the ingested feed
    date_placeholders: List[str] = ["YYYYMMDD"]
    reject_non_ascii_dates: bool = True

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
