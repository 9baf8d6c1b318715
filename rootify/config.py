from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

APP_NAME = "rootify"
DEFAULT_DB_NAME = "rootify.db"
DEFAULT_HISTORY_LIMIT = 100

# CORS:
# - Default to a small allowlist (local dev). For production, set CORS_ORIGINS to your site origins.
#   Example:
#     CORS_ORIGINS=https://example.com,https://roots.example.com
DEFAULT_CORS_ORIGINS = [
    "http://localhost",
    "http://localhost:5173",
    "http://127.0.0.1",
    "http://127.0.0.1:5173",
]


def _parse_csv_env(name: str) -> list[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return []
    return [x.strip() for x in raw.split(",") if x.strip()]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def app_data_dir(platform: Optional[str] = None) -> Path:
    """Per-user data directory for the current platform (not created)."""
    platform = platform or sys.platform
    home = Path.home()
    if platform == "darwin":
        return home / "Library" / "Application Support" / APP_NAME
    if platform.startswith("win"):
        appdata = os.getenv("APPDATA", "").strip()
        if not appdata:
            raise RuntimeError("APPDATA environment variable not set")
        return Path(appdata) / APP_NAME
    return home / ".config" / APP_NAME


def resolve_data_dir() -> Path:
    raw = os.getenv("ROOTIFY_DATA_DIR", "").strip()
    if raw:
        return Path(raw).expanduser().resolve()
    return app_data_dir()


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_name: str = DEFAULT_DB_NAME
    cors_origins: tuple[str, ...] = tuple(DEFAULT_CORS_ORIGINS)
    log_file: Optional[Path] = None
    host: str = "127.0.0.1"
    port: int = 8000
    history_limit: int = DEFAULT_HISTORY_LIMIT

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    @property
    def log_path(self) -> Path:
        return self.log_file or self.data_dir / "logs" / "rootify.log"


def load_settings() -> Settings:
    log_file = os.getenv("ROOTIFY_LOG_FILE", "").strip()
    return Settings(
        data_dir=resolve_data_dir(),
        db_name=os.getenv("ROOTIFY_DB_NAME", "").strip() or DEFAULT_DB_NAME,
        cors_origins=tuple(_parse_csv_env("CORS_ORIGINS") or DEFAULT_CORS_ORIGINS),
        log_file=Path(log_file) if log_file else None,
        host=os.getenv("ROOTIFY_HOST", "127.0.0.1"),
        port=_int_env("ROOTIFY_PORT", 8000),
        history_limit=_int_env("ROOTIFY_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT),
    )
