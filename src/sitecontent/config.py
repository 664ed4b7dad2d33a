"""Unified configuration loaded from .sitecontent.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from sitecontent.cache import DEFAULT_CACHE_DIR, STORAGE_KEY

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".sitecontent.toml"
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "sitecontent" / "config.toml"
DEFAULT_ADMIN_SECRET = "sitecontent_admin_secret"
DEFAULT_SAVE_DELAY_MS = 1000


class RemoteConfig(BaseModel):
    """[remote] section, Supabase project and save function."""

    url: str = ""
    anon_key: str = ""
    admin_secret: str = DEFAULT_ADMIN_SECRET
    table: str = "site_content"
    row_id: str = "main"
    function: str = "save-content"
    timeout: float = 15.0

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


class CacheConfig(BaseModel):
    """[cache] section."""

    directory: str = str(DEFAULT_CACHE_DIR)
    key: str = STORAGE_KEY


class SaveConfig(BaseModel):
    """[save] section."""

    delay_ms: int = Field(default=DEFAULT_SAVE_DELAY_MS, ge=0)

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000


class SiteContentConfig(BaseModel):
    """Top-level configuration for the persistence layer."""

    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    save: SaveConfig = Field(default_factory=SaveConfig)


def load_config(path: str | Path | None = None) -> SiteContentConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .sitecontent.toml in CWD
    3. ~/.config/sitecontent/config.toml

    Then overlay environment variables.  Missing remote credentials are
    logged, never raised; remote calls then fail gracefully.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged SiteContentConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        candidate = Path(".") / CONFIG_FILENAME
        if candidate.exists():
            data = _load_toml(candidate)
            logger.info("Loaded config from %s", candidate)
        elif GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = SiteContentConfig.model_validate(data) if data else SiteContentConfig()
    config = _apply_env_vars(config)

    if not config.remote.is_configured:
        logger.error("Supabase URL or anon key not configured; remote store will be unavailable")

    return config


def merge_cli_overrides(config: SiteContentConfig, **cli_kwargs: object) -> SiteContentConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "remote_url": ("remote", "url"),
        "anon_key": ("remote", "anon_key"),
        "cache_dir": ("cache", "directory"),
        "save_delay_ms": ("save", "delay_ms"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = value

    return SiteContentConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: SiteContentConfig) -> SiteContentConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "SUPABASE_URL": ("remote", "url"),
        "SUPABASE_ANON_KEY": ("remote", "anon_key"),
        "ADMIN_SECRET": ("remote", "admin_secret"),
        "SITECONTENT_CACHE_DIR": ("cache", "directory"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value:
            data[section][field] = value

    delay_raw = os.environ.get("SITECONTENT_SAVE_DELAY_MS")
    if delay_raw is not None:
        try:
            delay_ms = int(delay_raw)
        except ValueError:
            delay_ms = -1
        if delay_ms >= 0:
            data["save"]["delay_ms"] = delay_ms
        else:
            logger.warning("Ignoring invalid SITECONTENT_SAVE_DELAY_MS=%r", delay_raw)

    return SiteContentConfig.model_validate(data)
