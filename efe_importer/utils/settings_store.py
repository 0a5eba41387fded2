"""YAML file-backed key/value store for importer settings and run state.

Holds the API credentials, the enabled flag, the cached access token, the
last successful run timestamp and the standing notices. Components receive
the store explicitly instead of reading module-level state.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigError
from .logging import get_logger

logger = get_logger("efe.settings")

CLIENT_ID = "client_id"
CLIENT_SECRET = "client_secret"
PRODUCT_ID = "product_id"
IS_ENABLED = "is_enabled"
TOKEN = "token"
LAST_SUCCESSFUL_RUN = "last_successful_run"
OUTPUT_FILE = "output_file"
UPLOADS_DIR = "uploads_dir"
UPLOADS_URL = "uploads_url"
API_URL = "api_url"
NOTICES = "notices"

DEFAULT_OUTPUT_FILE = "efe_articles.xml"
DEFAULT_UPLOADS_DIR = "uploads"
DEFAULT_API_URL = "https://apinews.efeservicios.com"

# Environment variables win over stored values for these keys.
ENV_OVERRIDES: Dict[str, str] = {
    CLIENT_ID: "EFE_CLIENT_ID",
    CLIENT_SECRET: "EFE_CLIENT_SECRET",
    PRODUCT_ID: "EFE_PRODUCT_ID",
    OUTPUT_FILE: "EFE_OUTPUT_FILE",
    UPLOADS_DIR: "EFE_UPLOADS_DIR",
    UPLOADS_URL: "EFE_UPLOADS_URL",
    API_URL: "EFE_API_URL",
}


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Return an aware datetime for a stored timestamp, or None.

    YAML turns ISO-8601 strings into datetimes on load, so both forms occur.
    Naive values are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class SettingsStore:
    """Persisted key/value settings.

    With ``path=None`` the store lives in memory only, which is what tests
    and dry runs without a settings file use.
    """

    def __init__(self, path: Path | str | None = None, *, data: Optional[Dict[str, Any]] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._data: Dict[str, Any] = dict(data or {})
        if self.path is not None and data is None:
            self._load()

    # ---------------- Persistence -----------------
    def _load(self) -> None:
        assert self.path is not None
        if not self.path.exists():
            logger.debug("Settings file %s does not exist yet; starting empty", self.path)
            return
        try:
            loaded = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Unable to read settings file {self.path}: {exc}") from exc
        if not isinstance(loaded, dict):
            raise ConfigError(f"Settings file {self.path} must contain a mapping at the top level")
        self._data = loaded

    def _save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                yaml.safe_dump(self._data, allow_unicode=True, sort_keys=True), encoding="utf-8"
            )
        except OSError as exc:
            raise ConfigError(f"Unable to write settings file {self.path}: {exc}") from exc

    # ---------------- Public API -----------------
    def get(self, key: str, default: Any = None) -> Any:
        env_name = ENV_OVERRIDES.get(key)
        if env_name:
            env_value = os.environ.get(env_name)
            if env_value:
                return env_value
        value = self._data.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._save()

    def get_datetime(self, key: str) -> Optional[datetime]:
        return coerce_datetime(self.get(key))

    def set_datetime(self, key: str, value: datetime) -> None:
        self.set(key, value.isoformat())

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._data)
