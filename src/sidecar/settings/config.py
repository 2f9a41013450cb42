"""Layered configuration for Sidecar.

Values are resolved from, lowest to highest priority:

* ``config/settings.default.toml``
* ``config/settings.<env>.toml`` where ``<env>`` is ``SIDECAR_ENV`` (default ``local``)
* ``config/settings.local.toml``
* ``SIDECAR_*`` environment variables, ``__`` separating section and key
* keyword arguments passed to ``Settings(...)``

Relative filesystem paths are anchored at ``project_root`` once loaded.
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(os.getenv("SIDECAR_PROJECT_ROOT", Path(__file__).resolve().parents[3]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "SIDECAR_ENV"
DEFAULT_ENV = "local"

# (section, field) pairs holding filesystem paths.
PATH_FIELDS: tuple[tuple[str, str], ...] = (
    ("export", "exports_dir"),
    ("export", "downloads_dir"),
    ("store", "url_store_path"),
)


def _current_env(explicit: str | None = None) -> str:
    return (explicit or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def config_layers(env: str) -> list[Path]:
    """TOML files consulted for *env*, lowest priority first."""
    return [
        CONFIG_DIR / "settings.default.toml",
        CONFIG_DIR / f"settings.{env}.toml",
        CONFIG_DIR / "settings.local.toml",
    ]


def _read_layer(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    with path.open("rb") as fh:
        return tomllib.load(fh)


def _overlay(base: dict[str, Any], top: dict[str, Any]) -> dict[str, Any]:
    """Merge *top* over *base*, one level deep for section tables."""
    out = dict(base)
    for key, value in top.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = {**out[key], **value}
        else:
            out[key] = value
    return out


def _section(prefix: str) -> SettingsConfigDict:
    return SettingsConfigDict(env_prefix=f"SIDECAR_{prefix.upper()}__")


class BrowserSettings(BaseSettings):
    """Chromium launched by ``sidecar action``."""

    model_config = _section("browser")

    headless: bool = True
    start_url: str = ""
    viewport_width: int = 1200
    viewport_height: int = 800
    timeout_ms: int = 30_000


class CaptureSettings(BaseSettings):
    """Full-page screenshot tuning."""

    model_config = _section("capture")

    scroll_settle_sec: float = 0.3
    protocol_version: str = "1.3"


class ExportSettings(BaseSettings):
    model_config = _section("export")

    exports_dir: str = "data/exports"
    downloads_dir: str = str(Path.home() / "Downloads")


class StoreSettings(BaseSettings):
    model_config = _section("store")

    url_store_path: str = "data/url-store.json"


class Settings(BaseSettings):
    """Everything Sidecar reads from configuration."""

    model_config = SettingsConfigDict(env_prefix="SIDECAR_", env_nested_delimiter="__", extra="ignore")

    env: str = Field(default_factory=_current_env)
    project_root: Path = PROJECT_ROOT
    debug: bool = False
    log_level: str = "INFO"

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)

    @model_validator(mode="before")
    @classmethod
    def _apply_config_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for path in config_layers(_current_env(values.get("env"))):
            merged = _overlay(merged, _read_layer(path))
        return _overlay(merged, values)

    @model_validator(mode="after")
    def _anchor_paths(self) -> Settings:
        for section_name, field_name in PATH_FIELDS:
            section = getattr(self, section_name)
            value = Path(getattr(section, field_name))
            if not value.is_absolute():
                setattr(section, field_name, str(self.project_root / value))
        return self

    @property
    def effective_log_level(self) -> str:
        """``DEBUG`` under ``debug = true``, else the upper-cased ``log_level``."""
        return "DEBUG" if self.debug else self.log_level.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
