"""chatlog settings.

Settings live in ~/.chatlog/config.json and are validated with Pydantic.
A missing or unreadable file is not an error: every field has a default
that reproduces the stock label resolution behaviour.

Usage:
    from chatlog.config import get_config, save_config

    config = get_config()
    if not config.labels.heuristic_fallback:
        ...

    config.labels.wildcard_search = False
    save_config(config)
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".chatlog" / "config.json"


class LabelResolutionConfig(BaseModel):
    """Which label tiers the resolver may use.

    Attributes:
        wildcard_search: After the known junction tables, scan every table whose
            name contains "label" for a (username, label_id_) column pair.
        heuristic_fallback: When no structured label data exists, tag contacts
            whose remark or description marks them as customers.
    """

    wildcard_search: bool = True
    heuristic_fallback: bool = True


class LoggingConfig(BaseModel):
    """Root logger settings applied by configure_logging()."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: str = Field(default="%(asctime)s %(levelname)s %(name)s %(message)s", min_length=1)


class ChatlogConfig(BaseModel):
    """Top-level settings file layout."""

    labels: LabelResolutionConfig = Field(default_factory=LabelResolutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


_config: ChatlogConfig | None = None
_config_lock = threading.Lock()


def load_config(config_path: Path | None = None) -> ChatlogConfig:
    """Read settings from disk, falling back to defaults.

    Malformed JSON, a non-object document and values that fail validation
    all yield the defaults with a warning.

    Args:
        config_path: Settings file. Defaults to CONFIG_PATH.

    Returns:
        Validated settings.
    """
    path = config_path or CONFIG_PATH
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug(f"No settings file at {path}, using defaults")
        return ChatlogConfig()
    except OSError as e:
        logger.warning(f"Cannot read settings file {path}: {e}, using defaults")
        return ChatlogConfig()

    try:
        return ChatlogConfig.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid settings in {path}: {e.error_count()} error(s)")
        return ChatlogConfig()


def save_config(config: ChatlogConfig, config_path: Path | None = None) -> bool:
    """Write settings as owner-only JSON.

    Returns:
        True on success, False if the file could not be written.
    """
    path = config_path or CONFIG_PATH
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        path.chmod(0o600)
    except OSError as e:
        logger.error(f"Failed to save settings to {path}: {e}")
        return False
    return True


def get_config() -> ChatlogConfig:
    """Return the process-wide settings, loading them on first use."""
    global _config
    with _config_lock:
        if _config is None:
            _config = load_config()
        return _config


def reset_config() -> None:
    """Forget the loaded settings so the next get_config() re-reads the file."""
    global _config
    with _config_lock:
        _config = None


def configure_logging(config: ChatlogConfig | None = None) -> None:
    """Apply the configured log level and format to the root logger."""
    settings = (config or get_config()).logging
    logging.basicConfig(level=getattr(logging, settings.level), format=settings.format)
