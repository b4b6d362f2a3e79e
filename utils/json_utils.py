import json
from pathlib import Path
from typing import Any

from config import ENCODING


def get_json(
    filename: str | Path, encoding: str = ENCODING
) -> dict[str, Any] | list[Any] | None:
    """Reads a JSON file and returns its content.

    If the file does not exist or the content is not a valid JSON, returns None.
    """
    filename = Path(filename)
    if not filename.exists():
        return None
    try:
        with open(filename, encoding=encoding) as data_file:
            return json.load(data_file)
    except json.JSONDecodeError:
        return None
