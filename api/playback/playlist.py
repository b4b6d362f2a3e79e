"""Playlist order, repeat and shuffle management."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import config

from .models import RepeatMode, Track, TrackId

logger = logging.getLogger(__name__)


class PlaylistStore:
    """Holds the original track order and a derived shuffled order."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._original: tuple[Track, ...] = ()
        self._shuffled: tuple[Track, ...] = ()
        self.wrap_at_end = config.WRAP_AT_END

    def __len__(self) -> int:
        """Return the number of tracks in the playlist."""
        return len(self._original)

    def __iter__(self) -> Iterator[Track]:
        """Iterate over the tracks in original order."""
        return iter(self._original)

    def __contains__(self, track_id: object) -> bool:
        if isinstance(track_id, Track):
            track_id = track_id.id
        return any(t.id == track_id for t in self._original)

    @property
    def is_empty(self) -> bool:
        """Check if the playlist is empty."""
        return not self._original

    @property
    def original(self) -> tuple[Track, ...]:
        return self._original

    @property
    def shuffled(self) -> tuple[Track, ...]:
        return self._shuffled

    def load(self, tracks: Iterable[Track]) -> None:
        """Replace the playlist and compute a fresh shuffled order.

        Duplicate ids keep their first occurrence.
        """
        unique: dict[TrackId, Track] = {}
        for track in tracks:
            if track.id in unique:
                logger.warning("Dropping duplicate track id %s (%s)", track.id, track.title)
                continue
            unique[track.id] = track
        self._original = tuple(unique.values())
        self.reshuffle()
        logger.debug("Loaded playlist with %d tracks", len(self._original))

    def reshuffle(self) -> None:
        """Regenerate the shuffled order from the original order."""
        temp = list(self._original)
        self._rng.shuffle(temp)
        self._shuffled = tuple(temp)

    def get(self, track_id: TrackId) -> Track | None:
        """Look up a track by id."""
        return next((t for t in self._original if t.id == track_id), None)

    def active_sequence(self, shuffle_on: bool) -> tuple[Track, ...]:
        """Return the shuffled order if shuffle is on, else the original."""
        return self._shuffled if shuffle_on else self._original

    def index_of(self, track_id: TrackId, shuffle_on: bool) -> int | None:
        """Position of a track in the active sequence, None if absent."""
        for index, track in enumerate(self.active_sequence(shuffle_on)):
            if track.id == track_id:
                return index
        return None

    def next(self, current_id: TrackId, shuffle_on: bool) -> Track | None:
        """Track after ``current_id`` in the active sequence, wrapping to the first."""
        sequence = self.active_sequence(shuffle_on)
        index = self.index_of(current_id, shuffle_on)
        if index is None:
            return None
        if index < len(sequence) - 1:
            return sequence[index + 1]
        return sequence[0] if self.wrap_at_end else None

    def previous(self, current_id: TrackId, shuffle_on: bool) -> Track | None:
        """Track before ``current_id`` in the active sequence, wrapping to the last."""
        sequence = self.active_sequence(shuffle_on)
        index = self.index_of(current_id, shuffle_on)
        if index is None:
            return None
        if index > 0:
            return sequence[index - 1]
        return sequence[-1] if self.wrap_at_end else None

    def up_next(self, current_id: TrackId | None, shuffle_on: bool) -> tuple[Track, ...]:
        """Tracks strictly after the current one in the active sequence."""
        if current_id is None:
            return ()
        index = self.index_of(current_id, shuffle_on)
        if index is None:
            return ()
        return self.active_sequence(shuffle_on)[index + 1 :]


@dataclass(slots=True)
class RepeatModeController:
    """Manages the repeat mode.

    Attributes:
        mode: The current repeat mode.
        repeated_once: Whether the single repeat of ``REPEAT_ONCE`` was used
            for the current track.

    """

    mode: RepeatMode = RepeatMode.OFF
    repeated_once: bool = False

    def cycle(self) -> RepeatMode:
        """Advance OFF -> REPEAT_ONCE -> REPEAT_CURRENT -> OFF."""
        self.mode = self.mode.next
        return self.mode

    def reset(self) -> None:
        """Back to OFF with no pending repeat."""
        self.mode = RepeatMode.OFF
        self.repeated_once = False


@dataclass(slots=True)
class ShuffleController:
    """Controls which playlist order is active."""

    playlist: PlaylistStore
    enabled: bool = False

    def toggle(self) -> bool:
        """Flip shuffle, reshuffling the playlist when turning it on."""
        self.enabled = not self.enabled
        if self.enabled:
            self.playlist.reshuffle()
        return self.enabled
