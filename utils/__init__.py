from utils.json_utils import get_json
from utils.logging_setup import setup_logging
from utils.time_utils import format_duration, parse_duration

__all__ = [
    "format_duration",
    "get_json",
    "parse_duration",
    "setup_logging",
]
