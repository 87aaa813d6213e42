# Configuration management

from pydantic import field_validator
from pydantic_settings import BaseSettings  # type: ignore
from functools import lru_cache
from typing import List, Optional

# Sizes accepted by the Dropbox thumbnail endpoint
THUMBNAIL_SIZES = (
    "w32h32", "w64h64", "w128h128", "w256h256", "w480h320",
    "w640h480", "w960h640", "w1024h768", "w2048h1536",
)


class Settings(BaseSettings):
    # Storage
    storage_backend: str = "dropbox"  # dropbox or local
    storage_path: str = "./media"

    # Dropbox
    dropbox_access_token: str = ""
    # Long-lived access via refresh token (used when access token is empty)
    dropbox_app_key: str = ""
    dropbox_app_secret: Optional[str] = None
    dropbox_refresh_token: str = ""
    dropbox_timeout: float = 100.0
    account_name: str = "Your Dropbox"

    # Thumbnails
    site_root_url: str = "http://localhost:8000/"
    thumbnail_cache_path: str = "./.thumb_cache"
    thumbnail_url_prefix: str = "thumbnails"
    thumbnail_size: str = "w128h128"

    # Local backend: URL path under which storage_path is served
    local_url_prefix: str = "files"

    # Application
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    json_logs: bool = True

    # Security
    allowed_origins: List[str] = [
        "http://localhost:3000", "http://localhost:8000"]

    # Observability
    metrics_enabled: bool = True

    @field_validator("thumbnail_size")
    @classmethod
    def check_thumbnail_size(cls, value: str) -> str:
        if value not in THUMBNAIL_SIZES:
            raise ValueError(
                f"thumbnail_size must be one of {', '.join(THUMBNAIL_SIZES)}, got {value!r}")
        return value

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
