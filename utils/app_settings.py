"""Application settings loaded from environment variables (and `.env`)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} must be an integer") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name}={raw!r} must be a number") from exc


class AppSettings(BaseModel):
    """Top-level settings shared by the storage, labeling and metadata collaborators."""

    database_dir: Path = Field(description="Directory holding the SQLite database file.")
    item_table: str = Field(default="lost_items", description="Table holding item records.")
    storage_dir: Path = Field(description="Root directory of the local object store.")
    storage_bucket: str = Field(default="lost-and-found")
    storage_region: str = Field(default="local")
    public_base_url: str = Field(default="http://localhost:8000")
    openai_model: str = Field(default="gpt-5")
    label_max: int = Field(default=10, ge=1)
    label_min_confidence: float = Field(default=70.0, ge=0.0, le=100.0)
    label_cache_enabled: bool = False
    abort_on_upload_failure: bool = False
    sweep_interval_seconds: int = Field(default=0, ge=0)
    upload_retention_seconds: int = Field(default=86_400, ge=0)
    session_ttl_seconds: int = Field(default=3_600, ge=0)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "AppSettings":
        """Build settings from the process environment, loading `.env` first if present."""
        load_dotenv(env_file)

        env_dir = os.getenv("DATABASE_DIR")
        if env_dir is None or not env_dir.strip():
            raise RuntimeError(
                "DATABASE_DIR environment variable must be set to a writable "
                "directory path where the SQLite database file will be stored."
            )
        database_dir = Path(env_dir).expanduser()
        storage_dir = Path(os.getenv("STORAGE_DIR") or database_dir / "objects").expanduser()

        return cls(
            database_dir=database_dir,
            item_table=os.getenv("ITEM_TABLE", "lost_items"),
            storage_dir=storage_dir,
            storage_bucket=os.getenv("STORAGE_BUCKET", "lost-and-found"),
            storage_region=os.getenv("STORAGE_REGION", "local"),
            public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000"),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-5"),
            label_max=_env_int("LABEL_MAX", 10),
            label_min_confidence=_env_float("LABEL_MIN_CONFIDENCE", 70.0),
            label_cache_enabled=_env_bool("LABEL_CACHE_ENABLED", False),
            abort_on_upload_failure=_env_bool("ABORT_ON_UPLOAD_FAILURE", False),
            sweep_interval_seconds=_env_int("SWEEP_INTERVAL_SECONDS", 0),
            upload_retention_seconds=_env_int("UPLOAD_RETENTION_SECONDS", 86_400),
            session_ttl_seconds=_env_int("SESSION_TTL_SECONDS", 3_600),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
