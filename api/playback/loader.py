"""Load track lists from JSON files."""

from __future__ import annotations

import logging
from pathlib import Path

from api.exceptions import BusinessError
from utils.json_utils import get_json

from .models import Track

logger = logging.getLogger(__name__)


def load_tracks(path: str | Path) -> list[Track]:
    """Read tracks from a JSON file.

    The file holds either a list of track records or an object with a
    ``tracks`` list. Records without an id are skipped.
    """
    data = get_json(path)
    if data is None:
        raise BusinessError(f"No readable track list at {path}", "Track list not found")

    records = data.get("tracks") if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise BusinessError(f"Unexpected track list shape in {path}")

    tracks: list[Track] = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning("Skipping non-object track record: %r", record)
            continue
        try:
            tracks.append(Track.from_json(record))
        except BusinessError as e:
            logger.warning("Skipping track record: %s", e)
    logger.info("Loaded %d tracks from %s", len(tracks), path)
    return tracks
