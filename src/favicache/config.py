"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (FAVICACHE__CACHE__TTL_DAYS=3)
  2. favicache.yaml         (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional. Every field has a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("favicache")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "store.db")


def _find_config_file() -> str | None:
    """Return the path of the first favicache.yaml found, or None."""
    candidates = [
        Path("favicache.yaml"),
        Path(platformdirs.user_config_dir("favicache")) / "favicache.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    transport: Literal["stdio"] = "stdio"


class StorageSettings(BaseModel):
    db_path: str = _DEFAULT_DB_PATH


class CacheSettings(BaseModel):
    ttl_days: int = Field(default=7, ge=1)
    max_entries: int = Field(default=500, ge=1)
    # Eviction runs once the collection grows past max_entries * eviction_headroom
    eviction_headroom: float = Field(default=1.2, ge=1.0)
    eviction_interval_hours: int = Field(default=6, ge=1)


class ProbeSettings(BaseModel):
    timeout_seconds: float = Field(default=5.0, gt=0)
    max_bytes: int = Field(default=1_048_576, gt=0)
    default_size: int = Field(default=32, ge=1, le=256)
    user_agent: str = "favicache/1.0"


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: FAVICACHE__PROBE__TIMEOUT_SECONDS=2
        env_prefix="FAVICACHE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    storage: StorageSettings = StorageSettings()
    cache: CacheSettings = CacheSettings()
    probe: ProbeSettings = ProbeSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
