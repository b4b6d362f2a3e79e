# ruff: noqa: E501
import logging.config
from pathlib import Path
from typing import Any

import config

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_handler(filename: str, encoding: str, formatter: str, level: str) -> dict[str, Any]:
    Path(filename).parent.mkdir(parents=True, exist_ok=True)
    return {
        "class": "logging.FileHandler",
        "filename": filename,
        "encoding": encoding,
        "formatter": formatter,
        "level": level,
    }


def setup_logging(encoding: str = "utf-8", console_level: str | None = None) -> None:
    """Configure console logging plus the info and debug log files.

    An empty ``SEQUENCER_LOG_FILE`` / ``SEQUENCER_DEBUG_LOG_FILE`` disables
    the matching file handler.
    """
    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "level": console_level or config.LOG_LEVEL,
        },
    }
    if config.LOG_FILE:
        handlers["sequencer_file"] = _file_handler(
            config.LOG_FILE, encoding, "detailed", "INFO"
        )
    if config.DEBUG_LOG_FILE:
        handlers["sequencer_debug_file"] = _file_handler(
            config.DEBUG_LOG_FILE, encoding, "debug_detailed", "DEBUG"
        )

    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s %(levelname)-8s %(message)s",
                "datefmt": "%H:%M:%S",
            },
            "detailed": {
                "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s",
                "datefmt": DATE_FORMAT,
            },
            "debug_detailed": {
                "format": "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(funcName)s: %(message)s",
                "datefmt": DATE_FORMAT,
            },
        },
        "handlers": handlers,
        "root": {"handlers": list(handlers), "level": "DEBUG"},
        "loggers": {
            # no per-publish DEBUG lines from the event bus
            "events": {"level": "INFO"},
            "api.playback": {"level": "DEBUG"},
        },
    }

    logging.config.dictConfig(logging_config)
