"""
Runtime configuration for response formatting and pagination.
The values are process-wide and read-only once a request is being served.
They are loaded from `.env` and the process environment at startup.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

KeyFormat = Literal["underscored", "dasherized", "camelized"]


class JsonApiConfig(BaseModel):
    """Typed formatter configuration."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    default_paginator: str = "none"
    default_page_size: int = 10
    maximum_page_size: int = 20
    top_level_links_include_pagination: bool = True
    top_level_meta_include_record_count: bool = False
    top_level_meta_record_count_key: str = "record_count"
    json_key_format: KeyFormat = "underscored"
    log_level: str = "INFO"

    @field_validator("default_paginator")
    @classmethod
    def normalize_paginator_name(cls, value: str) -> str:
        cleaned = value.strip().lower()
        if not cleaned:
            raise ValueError("default_paginator cannot be empty.")
        return cleaned

    @field_validator("default_page_size", "maximum_page_size")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Value must be greater than 0.")
        return value

    @model_validator(mode="after")
    def validate_page_size_bounds(self) -> JsonApiConfig:
        if self.default_page_size > self.maximum_page_size:
            raise ValueError("default_page_size must be <= maximum_page_size.")
        return self

    @property
    def pagination_enabled(self) -> bool:
        return self.default_paginator != "none"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be boolean-like, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def load_config(*, load_env: bool = True) -> JsonApiConfig:
    """Load formatter configuration from `.env` and process environment."""

    if load_env:
        load_dotenv()

    config_values: dict[str, object] = {
        "default_paginator": os.getenv("JSONAPI_DEFAULT_PAGINATOR", "none"),
        "default_page_size": _env_int("JSONAPI_DEFAULT_PAGE_SIZE", 10),
        "maximum_page_size": _env_int("JSONAPI_MAXIMUM_PAGE_SIZE", 20),
        "top_level_links_include_pagination": _env_bool(
            "JSONAPI_TOP_LEVEL_LINKS_INCLUDE_PAGINATION", True
        ),
        "top_level_meta_include_record_count": _env_bool(
            "JSONAPI_TOP_LEVEL_META_INCLUDE_RECORD_COUNT", False
        ),
        "top_level_meta_record_count_key": os.getenv(
            "JSONAPI_TOP_LEVEL_META_RECORD_COUNT_KEY", "record_count"
        ),
        "json_key_format": os.getenv("JSONAPI_JSON_KEY_FORMAT", "underscored"),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }

    try:
        return JsonApiConfig.model_validate(config_values)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid JSON:API configuration: {exc}") from exc


@lru_cache(maxsize=1)
def get_config() -> JsonApiConfig:
    """Cached accessor for formatter configuration."""

    return load_config()
