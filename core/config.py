"""
Core configuration module for environment variables and settings management.

Design choices:
- Uses python-dotenv to load environment variables from a .env file when present.
- Keeps the filesystem naming convention (extensions, reserved directories, id separator)
  in settings so every consumer of the course tree walks the docs root the same way.
- Provides a single get_settings() accessor with LRU caching to avoid repeated parsing.
"""
from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    environment: str = "dev"

    # Root directory holding category folders (or zh/ and en/ locale trees)
    docs_root: str = "cs-self-learning/docs"
    images_dir: str = "images"

    # File naming convention for base and counterpart-language course files
    base_extension: str = ".md"
    counterpart_suffix: str = ".en.md"
    id_separator: str = "-"

    # Text truncation for card display
    summary_max_length: int = 150
    description_max_length: int = 200

    # Site / i18n
    site_url: str = "http://localhost:3000"
    default_locale: str = "en"
    locales: List[str] = Field(default_factory=lambda: ["en", "zh"])

    search_default_limit: int = 10

    log_level: str = "INFO"

    # API versioning (useful for mounting routers and future deprecations)
    api_v1_prefix: str = "/api/v1"

    # Optional override for where export_catalog writes its output
    export_dir: Optional[str] = None


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load environment variables (from .env if present) and build a Settings object.

    This function is cached so app startup and repeated imports are efficient.
    """
    load_dotenv()  # no-op if .env not present
    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        docs_root=os.getenv("DOCS_ROOT", "cs-self-learning/docs"),
        images_dir=os.getenv("IMAGES_DIR", "images"),
        base_extension=os.getenv("BASE_EXTENSION", ".md"),
        counterpart_suffix=os.getenv("COUNTERPART_SUFFIX", ".en.md"),
        id_separator=os.getenv("ID_SEPARATOR", "-"),
        summary_max_length=int(os.getenv("SUMMARY_MAX_LENGTH", "150")),
        description_max_length=int(os.getenv("DESCRIPTION_MAX_LENGTH", "200")),
        site_url=os.getenv("SITE_URL", "http://localhost:3000"),
        default_locale=os.getenv("DEFAULT_LOCALE", "en"),
        locales=_split_csv(os.getenv("LOCALES", "en,zh")),
        search_default_limit=int(os.getenv("SEARCH_DEFAULT_LIMIT", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        api_v1_prefix=os.getenv("API_V1_PREFIX", "/api/v1"),
        export_dir=os.getenv("EXPORT_DIR"),
    )
