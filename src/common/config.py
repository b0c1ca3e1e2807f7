"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


class DatabaseSettings(BaseModel):
    """Database connection settings."""
    data_dir: str = str(DATA_DIR)
    name: str = "ecommerce"
    timeout_seconds: float = Field(default=5.0, gt=0)
    max_open_connections: int = Field(default=20, ge=1)
    max_idle_connections: int = Field(default=20, ge=1)
    connection_max_lifetime_seconds: float = Field(default=300.0, gt=0)
    max_batch_rows: int = Field(default=500, ge=1)

    @property
    def db_path(self) -> Path:
        """Resolve the database file, relative paths against project root."""
        p = Path(self.data_dir)
        if not p.is_absolute():
            p = PROJECT_ROOT / p
        return p / f"{self.name}.db"


class LoggingSettings(BaseModel):
    """Logging settings."""
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = str(value).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level


class Settings(BaseModel):
    """Top-level application settings."""
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load settings from YAML, falling back to defaults.

        Environment variables override whatever the file provides.
        """
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

        database = data["database"] = data.get("database") or {}
        if data_dir := os.getenv("CATALOG_DATA_DIR"):
            database["data_dir"] = data_dir
        if name := os.getenv("CATALOG_DB_NAME"):
            database["name"] = name
        if timeout := os.getenv("CATALOG_DB_TIMEOUT"):
            database["timeout_seconds"] = timeout
        if level := os.getenv("CATALOG_LOG_LEVEL"):
            logging_data = data["logging"] = data.get("logging") or {}
            logging_data["level"] = level

        return cls(**data)
