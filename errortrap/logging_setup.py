"""Central logging configuration for errortrap.

Installs a single root handler so the module loggers (captured-error log
lines in particular) are visible without per-module setup. Uses rich for
console output unless plain output is requested.
"""

import logging
from logging.config import dictConfig
from typing import Any


def _dict_config(level: str, rich: bool) -> dict[str, Any]:
    if rich:
        handler: dict[str, Any] = {
            "class": "rich.logging.RichHandler",
            "level": level,
            "formatter": "rich",
            "show_path": False,
        }
    else:
        handler = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "default",
            "stream": "ext://sys.stderr",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s:%(name)s:%(message)s"},
            "rich": {"format": "%(message)s", "datefmt": "[%X]"},
        },
        "handlers": {"console": handler},
        "root": {"level": level, "handlers": ["console"]},
    }


def configure_logging(level: str = "INFO", rich: bool = True) -> None:
    """Configure logging once.

    If the root logger already has handlers, return to prevent duplicate
    output (pytest and embedding applications install their own).
    """
    root = logging.getLogger()
    if root.handlers:
        return
    dictConfig(_dict_config(level.upper(), rich))
