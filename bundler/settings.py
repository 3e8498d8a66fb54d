from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import InvalidBundleOption
from .options import BundleOption


class BundlerSettings(BaseSettings):
    """Asset resolution configuration pulled from environment/.env."""

    # Unset means no static root is hosted; every file probe then soft-misses.
    static_root: Optional[Path] = Field(None, alias="STATIC_ROOT")
    static_url_base: str = Field("/static/", alias="STATIC_URL_BASE")
    debug: bool = Field(False, alias="BUNDLER_DEBUG")
    # 'auto' (cache only while serving a non-debug request), 'on', 'off'
    cache_mode: str = Field("auto", alias="BUNDLER_CACHE_MODE")
    default_option: BundleOption = Field(BundleOption.MINIFIED, alias="BUNDLER_DEFAULT_OPTION")
    app_version: str = Field("dev", alias="APP_VERSION")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("static_root", mode="before")
    @classmethod
    def _blank_root(cls, value) -> Optional[str]:
        if value is None:
            return None
        val = str(value).strip()
        return val or None

    @field_validator("static_url_base", mode="before")
    @classmethod
    def _normalize_url_base(cls, value: str | None) -> str:
        val = (value or "/").strip() or "/"
        if not val.startswith("/"):
            val = "/" + val
        if not val.endswith("/"):
            val = val + "/"
        return val

    @field_validator("debug", mode="before")
    @classmethod
    def _parse_bool(cls, value) -> bool:
        if isinstance(value, bool):
            return value
        if value is None or value == "":
            return False
        return str(value).strip().lower() in {"1", "true", "yes", "on"}

    @field_validator("cache_mode", mode="before")
    @classmethod
    def _normalize_cache_mode(cls, value: str | None) -> str:
        val = (value or "auto").strip().lower()
        if val not in {"auto", "on", "off"}:
            return "auto"
        return val

    @field_validator("default_option", mode="before")
    @classmethod
    def _parse_option(cls, value) -> BundleOption:
        try:
            return BundleOption.parse(value, default=BundleOption.MINIFIED)
        except InvalidBundleOption:
            return BundleOption.MINIFIED


@lru_cache(maxsize=1)
def get_settings() -> BundlerSettings:
    return BundlerSettings()


def reset_settings_cache() -> None:
    """Testing helper to clear cached settings."""
    get_settings.cache_clear()
