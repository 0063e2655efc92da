"""Where the edition ledger and the HTTP cache live on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "editionsync"
LEDGER_FILENAME: Final[str] = "editionsync.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def file_path(self, filename: str) -> Path:
        """Path of ``filename`` inside the data directory, creating the directory."""

        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / filename

    def ledger_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.file_path(LEDGER_FILENAME)}"


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv("EDITIONSYNC_DATA_DIR")
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())


def get_database_uri(*, storage: StorageConfig | None = None) -> str:
    """``EDITIONSYNC_DATABASE_URI`` or the SQLite ledger in the data directory."""

    env_uri = os.getenv("EDITIONSYNC_DATABASE_URI")
    if env_uri:
        return env_uri
    return (storage or get_storage_config()).ledger_uri()


def get_http_cache_path() -> Path:
    return get_storage_config().file_path(HTTP_CACHE_FILENAME)
