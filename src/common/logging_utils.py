"""
Shared logging configuration helpers.

Reads the `logging` section of `config.yaml` (level, format, file) and
configures the root logger with a console handler plus an optional file
handler. The LOG_LEVEL environment variable overrides the configured level.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _load_logging_section(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    section = config.get("logging", {}) if isinstance(config, dict) else {}
    return section if isinstance(section, dict) else {}


def resolve_level(configured: Optional[str]) -> str:
    """Pick the effective level name: LOG_LEVEL env, then config, then INFO."""
    level_name = (os.getenv("LOG_LEVEL") or configured or "INFO").upper()
    if not isinstance(logging.getLevelName(level_name), int):
        level_name = "INFO"
    return level_name


def build_logging_config(logging_cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Translate the `logging` config section into a dictConfig mapping."""
    level_name = resolve_level(logging_cfg.get("level"))
    log_file = logging_cfg.get("file")

    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": level_name,
        },
    }
    root_handlers: List[str] = ["console"]

    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "standard",
            "level": level_name,
            "filename": log_file,
            "encoding": "utf-8",
        }
        root_handlers.append("file")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": logging_cfg.get("format") or DEFAULT_FORMAT},
        },
        "handlers": handlers,
        "root": {"level": level_name, "handlers": root_handlers},
    }


def setup_logging(config_path: str = "config.yaml") -> None:
    """Initialize application-wide logging from `config_path`."""
    dict_config = build_logging_config(_load_logging_section(config_path))

    file_handler = dict_config["handlers"].get("file")
    if file_handler:
        Path(file_handler["filename"]).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(dict_config)
