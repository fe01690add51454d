"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

from medfinder.models import DEFAULT_EXCLUDED_KEYWORDS

logger = logging.getLogger(__name__)

DISTANCE_MODES = {"haversine", "driving"}


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    google_maps_api_key: str
    database_url: str
    worker_port: int = 9000
    max_detail_workers: int = 8
    http_timeout_seconds: float = 10.0
    distance_mode: str = "haversine"
    default_exclude_empty_fields: bool = True
    default_excluded_keywords: Tuple[str, ...] = DEFAULT_EXCLUDED_KEYWORDS


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_maps_api_key = os.getenv("GOOGLE_MAPS_API_KEY", "")
    database_url = os.getenv("DATABASE_URL", "")
    worker_port = int(os.getenv("WORKER_PORT", "9000"))
    max_detail_workers = max(1, int(os.getenv("MAX_DETAIL_WORKERS", "8")))
    http_timeout_seconds = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

    distance_mode = os.getenv("DISTANCE_MODE", "haversine").strip().lower()
    if distance_mode not in DISTANCE_MODES:
        logger.warning("Unknown DISTANCE_MODE=%s; falling back to haversine.", distance_mode)
        distance_mode = "haversine"

    default_exclude_empty_fields = _env_flag("DEFAULT_EXCLUDE_EMPTY_FIELDS", "true")
    keywords_raw = os.getenv("DEFAULT_EXCLUDED_KEYWORDS")
    if keywords_raw is None:
        default_excluded_keywords = DEFAULT_EXCLUDED_KEYWORDS
    else:
        default_excluded_keywords = tuple(k.strip().lower() for k in keywords_raw.split(",") if k.strip())

    if not database_url:
        logger.warning("DATABASE_URL is not set; saving professionals will fail.")
    if not google_maps_api_key:
        logger.warning("GOOGLE_MAPS_API_KEY is not configured; searches will fail.")

    return Settings(
        google_maps_api_key=google_maps_api_key,
        database_url=database_url,
        worker_port=worker_port,
        max_detail_workers=max_detail_workers,
        http_timeout_seconds=http_timeout_seconds,
        distance_mode=distance_mode,
        default_exclude_empty_fields=default_exclude_empty_fields,
        default_excluded_keywords=default_excluded_keywords,
    )


def require_api_key(settings: Settings) -> str:
    if not settings.google_maps_api_key:
        raise ConfigError("Google Maps API key is not configured")
    return settings.google_maps_api_key
