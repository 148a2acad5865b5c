"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, optguard.toml only contains
overrides. A fresh project needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from optguard.domain.catalog import (
    DEFAULT_FORCED_POST_TYPES,
    DEFAULT_SETTINGS_FIELD,
    SITEMAP_QUERY_MAX,
    SITEMAP_QUERY_MIN,
)

# --- optguard.toml sections ---


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    backend: Literal["sqlite", "memory"] = "sqlite"
    path: str = ".optguard/optguard.db"


class CatalogConfig(BaseModel):
    """[catalog] section."""

    model_config = {"frozen": True}

    settings_field: str = DEFAULT_SETTINGS_FIELD
    forced_post_types: list[str] = Field(default_factory=lambda: list(DEFAULT_FORCED_POST_TYPES))
    sitemap_query_min: int = SITEMAP_QUERY_MIN
    sitemap_query_max: int = SITEMAP_QUERY_MAX
    db_version_key: str = "optguard_db_version"
    db_version: str = "3101"


class MigrationConfig(BaseModel):
    """[migration] section."""

    model_config = {"frozen": True}

    enabled: bool = True


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".optguard/plugins"
