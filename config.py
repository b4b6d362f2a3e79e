"""Sequencer configuration and environment variables."""

import os
from datetime import timedelta
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# --- Directory structure ---
BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"


# --- Logging ---
LOG_FILE = os.getenv("SEQUENCER_LOG_FILE", "playlist-sequencer.log")
DEBUG_LOG_FILE = os.getenv("SEQUENCER_DEBUG_LOG_FILE", "playlist-sequencer-debug.log")
LOG_LEVEL = os.getenv("SEQUENCER_LOG_LEVEL", "INFO").upper()


# --- System constants ---
ENCODING = "utf-8"
"""Default text encoding for file I/O operations."""
DEFAULT_TRACKS_FILE = (DATA_DIR / "tracks").with_suffix(".json")


# --- Playback settings ---
WRAP_AT_END: Final = _env_flag("SEQUENCER_WRAP_AT_END", True)
"""Whether next/previous wrap around the ends of the playlist."""
SLEEP_TIMER_TICK_INTERVAL = float(os.getenv("SLEEP_TIMER_TICK_INTERVAL", 1.0))
"""Seconds between sleep timer countdown updates."""
SLEEP_TIMER_PRESETS: Final = (
    timedelta(minutes=5),
    timedelta(minutes=10),
    timedelta(minutes=15),
)

# main.py demo
DEMO_TICK_SECONDS = 0.2
"""Wall-clock seconds the demo spends on each simulated track."""
