"""Configuration settings for the store: environment defaults and config.json."""

import json
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from common.constants import CONFIG_FILENAME
from common.exceptions import ConfigError
from common.logging_config import get_logger

logger = get_logger(__name__)


DEFAULT_STORE_ROOT = os.environ.get("DABBA_STORE_ROOT", "./data")

DATABASE_FILENAME = os.environ.get("DABBA_DATABASE_FILENAME", "index.db")

LOG_LEVEL = os.environ.get("DABBA_LOG_LEVEL", "INFO")


class StoreSettings(BaseModel):
    """Per-store settings persisted in ``<root>/config.json``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    start_file: Optional[str] = Field(default=None, alias="start-file")


def load_store_settings(root: Union[str, Path]) -> StoreSettings:
    """
    Load ``config.json`` from the store root, creating it if absent.

    An absent or empty file yields default settings and is written back as
    ``{}``. Anything else that fails to decode is fatal.

    Args:
        root: Store root directory

    Returns:
        StoreSettings instance

    Raises:
        ConfigError: If the file cannot be read, written or decoded
    """
    config_path = Path(root) / CONFIG_FILENAME

    try:
        raw = config_path.read_text(encoding="utf-8") if config_path.exists() else ""
    except OSError as e:
        raise ConfigError(f"can't open settings file {config_path}: {e}") from e

    if not raw.strip():
        settings = StoreSettings()
        save_store_settings(root, settings)
        return settings

    try:
        settings = StoreSettings.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"decode settings file {config_path}: {e}") from e

    logger.debug(f"Loaded store settings from {config_path}")
    return settings


def save_store_settings(root: Union[str, Path], settings: StoreSettings) -> None:
    """Write settings to ``config.json``, omitting unset fields."""
    config_path = Path(root) / CONFIG_FILENAME
    try:
        with open(config_path, 'w', encoding="utf-8") as f:
            json.dump(settings.model_dump(by_alias=True, exclude_none=True), f, indent=2)
    except OSError as e:
        raise ConfigError(f"can't write settings file {config_path}: {e}") from e
