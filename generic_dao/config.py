"""Persistence configuration with JSON/YAML file and env variable support."""

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

from generic_dao.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "GENERIC_DAO_"


def _load_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON or YAML settings file into a flat mapping."""

    with path.open("r", encoding="utf-8") as f:
        if path.suffix.lower() in (".yml", ".yaml"):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")
    return data


class PersistenceConfig(BaseSettings):
    """Connection, pool and session settings.

    Load order (later overrides earlier):
    1. ``.env`` file
    2. settings file (JSON or YAML) passed to ``from_file``
    3. Environment variables

    Prefix: GENERIC_DAO_ (e.g., GENERIC_DAO_DATABASE_URL)
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Connection; database_url wins over the individual parts when set
    database_url: str | None = Field(default=None)
    driver_name: str = Field(default="sqlite+aiosqlite")
    username: str | None = Field(default=None)
    password: str | None = Field(default=None)
    host: str | None = Field(default=None)
    port: int | None = Field(default=None)
    database_name: str = Field(default="./generic_dao.db")

    # Pool (ignored for SQLite)
    pool_size: int | None = Field(default=None, ge=1)
    max_overflow: int | None = Field(default=None, ge=0)
    pool_timeout: float | None = Field(default=None, gt=0)
    pool_recycle: int | None = Field(default=None)
    pool_pre_ping: bool = Field(default=False)

    # Engine / schema
    echo: bool = Field(default=False, description="Log SQL statements")
    sqlite_timeout: int = Field(default=30, ge=0)
    auto_create_tables: bool = Field(
        default=False,
        description="Create missing tables in Database.connect instead of relying on migrations",
    )

    def url(self) -> str:
        """Return the SQLAlchemy URL for the configured database."""
        if self.database_url:
            return self.database_url

        return URL.create(
            drivername=self.driver_name,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database_name,
        ).render_as_string(hide_password=False)

    @classmethod
    def from_file(cls, config_path: str | Path) -> "PersistenceConfig":
        """Load settings from a JSON or YAML file with env var overrides.

        Args:
            config_path: Path to a ``.json``, ``.yml`` or ``.yaml`` file. A
                missing file yields defaults plus environment values.

        Returns:
            Configured PersistenceConfig instance.
        """
        path = Path(config_path)
        config_data: dict[str, Any] = {}
        if path.exists():
            config_data = _load_config_file(path)
        else:
            logger.warning("Settings file %s not found, using defaults", path)

        # Drop file values shadowed by an env var so the env var wins
        for key in list(config_data):
            if f"{ENV_PREFIX}{key.upper()}" in os.environ:
                del config_data[key]

        return cls(**config_data)
