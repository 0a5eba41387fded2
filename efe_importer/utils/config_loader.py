from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

from ..errors import ConfigError
from .logging import get_logger
from .settings_store import (
    API_URL,
    CLIENT_ID,
    CLIENT_SECRET,
    DEFAULT_API_URL,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_UPLOADS_DIR,
    IS_ENABLED,
    OUTPUT_FILE,
    PRODUCT_ID,
    UPLOADS_DIR,
    UPLOADS_URL,
    SettingsStore,
)

logger = get_logger("efe.config")

DEFAULT_SETTINGS_PATH = "config/efe.yaml"

# Keys whose stored value must be a plain string when present.
_STRING_KEYS = (CLIENT_ID, CLIENT_SECRET, OUTPUT_FILE, UPLOADS_DIR, UPLOADS_URL, API_URL)


def _validate_settings(data: Dict[str, Any]) -> None:
    """Validate the shape of a loaded settings mapping.

    Optional fields:
      - client_id, client_secret, output_file, uploads_dir, uploads_url, api_url: string
      - product_id: string or integer
      - is_enabled: boolean
    Unknown keys are kept for forward compatibility.
    """
    for key in _STRING_KEYS:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"'{key}' must be a string if provided, got {type(value).__name__}")

    product_id = data.get(PRODUCT_ID)
    if product_id is not None and not isinstance(product_id, (str, int)):
        raise ConfigError("'product_id' must be a string or integer if provided")

    is_enabled = data.get(IS_ENABLED)
    if is_enabled is not None and not isinstance(is_enabled, bool):
        raise ConfigError("'is_enabled' must be true or false if provided")

    output_file = data.get(OUTPUT_FILE)
    if output_file and (Path(output_file).is_absolute() or ".." in Path(output_file).parts):
        raise ConfigError(f"Invalid output_file '{output_file}'. Must be a relative path inside the uploads directory.")


def settings_path_from_env(path: Path | str | None = None) -> Path:
    return Path(path or os.environ.get("EFE_SETTINGS_PATH") or DEFAULT_SETTINGS_PATH)


def load_settings(path: Path | str | None = None) -> SettingsStore:
    """Load the settings file into a :class:`SettingsStore`.

    A missing file is not an error: the store starts empty and is created on
    the first write. Credentials may also come from ``EFE_*`` environment
    variables.
    """
    store = SettingsStore(settings_path_from_env(path))
    _validate_settings(store.as_dict())
    return store


def is_configured(store: SettingsStore) -> bool:
    """Indicates whether all the options needed to use the API are set."""
    return bool(store.get(CLIENT_ID) and store.get(CLIENT_SECRET) and store.get(PRODUCT_ID))


def is_active(store: SettingsStore) -> bool:
    return bool(store.get(IS_ENABLED)) and is_configured(store)


def set_enabled(store: SettingsStore, enabled: bool) -> bool:
    """Enable or disable fetching from the API.

    Enabling requires client id, client secret and product id to be set.
    """
    if enabled and not is_configured(store):
        logger.warning("Refusing to enable fetching from the EFE API: missing configuration options")
        raise ConfigError(
            "Unable to enable fetching of articles from the EFE API due to missing configuration options. "
            "A client id, client secret and product id are required."
        )
    store.set(IS_ENABLED, bool(enabled))
    return bool(enabled)


def output_file(store: SettingsStore) -> str:
    return str(store.get(OUTPUT_FILE, DEFAULT_OUTPUT_FILE))


def uploads_dir(store: SettingsStore) -> Path:
    return Path(store.get(UPLOADS_DIR, DEFAULT_UPLOADS_DIR))


def api_url(store: SettingsStore) -> str:
    return str(store.get(API_URL, DEFAULT_API_URL)).rstrip("/")
