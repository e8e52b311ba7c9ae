"""Where the reconciled graph and the Graph response cache live on disk."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "intune-graph"
DEFAULT_DB_FILENAME: Final[str] = "intune_graph.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Data directory holding one graph database per tenant and a shared HTTP cache."""

    data_dir: Path

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def _file(self, filename: str, *, ensure: bool) -> Path:
        base = self.resolve_data_dir()
        if ensure:
            base.mkdir(parents=True, exist_ok=True)
        return base / filename

    def database_path(self, tenant_id: str | None = None, *, ensure: bool = True) -> Path:
        return self._file(database_filename(tenant_id), ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return self._file(HTTP_CACHE_FILENAME, ensure=ensure)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def database_filename(tenant_id: str | None) -> str:
    """``intune_graph.db``, or ``intune_graph-<tenant>.db`` so tenants never share a graph."""

    if not tenant_id:
        return DEFAULT_DB_FILENAME
    slug = _UNSAFE_FILENAME_CHARS.sub("_", tenant_id.strip()).strip("._") or "tenant"
    return f"intune_graph-{slug}.db"


def _default_data_dir() -> Path:
    if sys.platform == "win32":
        base = optional_env_var("LOCALAPPDATA")
        base_path = Path(base) if base else Path.home() / "AppData" / "Local"
    else:
        base = optional_env_var("XDG_DATA_HOME")
        base_path = Path(base) if base else Path.home() / ".local" / "share"
    return base_path / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    env_dir = optional_env_var("INTUNE_GRAPH_DATA_DIR")
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())


def get_database_config(
    *, tenant_id: str | None = None, storage: StorageConfig | None = None
) -> DatabaseConfig:
    """``INTUNE_GRAPH_DATABASE_URI`` wins; otherwise a SQLite file per tenant in the data dir."""

    env_uri = optional_env_var("INTUNE_GRAPH_DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    path = (storage or get_storage_config()).database_path(tenant_id)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{path}")
