"""Persistent user configuration (``~/.skillfactory/config.json``)."""

from __future__ import annotations

import json
import logging
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from skillfactory.constants import CONFIG_FILE
from skillfactory.errors import ConfigurationError

logger = logging.getLogger(__name__)


class FactoryConfig(BaseModel):
    """Settings remembered between runs."""

    model_config = ConfigDict(extra="ignore")

    skills_folder: str = ""


def load_config(path: Optional[str] = None) -> FactoryConfig:
    """Load the config from disk.

    A missing or corrupt file yields an empty config; any other I/O error
    raises :class:`ConfigurationError`.
    """
    cfg_path = path or CONFIG_FILE
    try:
        with open(cfg_path, encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError:
        return FactoryConfig()
    except json.JSONDecodeError:
        logger.debug("Ignoring corrupt config at %s", cfg_path, exc_info=True)
        return FactoryConfig()
    except OSError as exc:
        raise ConfigurationError(f"Error reading config file: {cfg_path}\n  {exc}") from exc

    if not isinstance(data, dict):
        return FactoryConfig()
    try:
        return FactoryConfig.model_validate(data)
    except ValidationError:
        logger.debug("Ignoring invalid config at %s", cfg_path, exc_info=True)
        return FactoryConfig()


def save_config(cfg: FactoryConfig, path: Optional[str] = None) -> None:
    """Persist *cfg* to disk, creating the directory if needed."""
    cfg_path = path or CONFIG_FILE
    try:
        os.makedirs(os.path.dirname(cfg_path) or ".", exist_ok=True)
        with open(cfg_path, "w", encoding="utf-8") as fh:
            json.dump(cfg.model_dump(exclude_defaults=True), fh, indent=2)
    except OSError as exc:
        raise ConfigurationError(f"Error writing config file: {cfg_path}\n  {exc}") from exc
    logger.debug("Config saved to %s", cfg_path)
