"""Models and data structures for the playback module."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum, auto
from typing import Any, Self

from api.exceptions import BusinessError
from utils.time_utils import parse_duration

logger = logging.getLogger(__name__)

type TrackId = str


class PlaybackResultStatus(StrEnum):
    """Status of a playback operation."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ERROR = "ERROR"


class RepeatMode(StrEnum):
    """Repeat modes, cycled in declaration order."""

    OFF = "off"
    REPEAT_ONCE = "repeat_once"
    REPEAT_CURRENT = "repeat_current"

    @property
    def next(self) -> RepeatMode:
        """The mode that follows this one in the cycle."""
        match self:
            case RepeatMode.OFF:
                return RepeatMode.REPEAT_ONCE
            case RepeatMode.REPEAT_ONCE:
                return RepeatMode.REPEAT_CURRENT
            case _:
                return RepeatMode.OFF

    @property
    def loop_mode(self) -> LoopMode:
        """Engine-level loop setting for this mode."""
        return LoopMode.ONE if self is RepeatMode.REPEAT_CURRENT else LoopMode.OFF


class LoopMode(StrEnum):
    """Loop setting understood by the audio engine."""

    OFF = auto()
    ONE = auto()


class ProcessingState(StrEnum):
    """Engine processing state."""

    IDLE = auto()
    LOADING = auto()
    BUFFERING = auto()
    READY = auto()
    COMPLETED = auto()


@dataclass(frozen=True, slots=True)
class Track:
    """An immutable playlist entry. Two tracks are equal when their ids match."""

    id: TrackId
    title: str = field(compare=False)
    subtitle: str = field(default="", compare=False)
    audio_url: str = field(default="", compare=False)
    image_url: str = field(default="", compare=False)
    duration: timedelta = field(default_factory=timedelta, compare=False)
    description: str | None = field(default=None, compare=False)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> Self:
        """Build a track from a JSON record.

        Legacy keys are accepted as fallbacks: ``name`` for the title,
        ``location_url`` for the audio URL and ``image`` for the artwork.
        """
        if data.get("id") is None:
            raise BusinessError("Track record has no id", "Invalid track entry")
        raw_duration = data.get("duration")
        duration_text = raw_duration if isinstance(raw_duration, str) else ""
        return cls(
            id=str(data["id"]),
            title=data.get("title") or data.get("name") or "",
            subtitle=data.get("subtitle") or duration_text,
            audio_url=data.get("audioUrl") or data.get("location_url") or "",
            image_url=data.get("imageUrl") or data.get("image") or "",
            duration=parse_duration(duration_text),
            description=data.get("description"),
        )


@dataclass(slots=True)
class PlaybackSession:
    """Mirror of what the engine is doing for the current track."""

    track: Track
    is_playing: bool = False
    position: timedelta = field(default_factory=timedelta)
    duration: timedelta | None = None
    processing_state: ProcessingState = ProcessingState.IDLE
    error: str | None = None


@dataclass(frozen=True, slots=True)
class PlaybackSnapshot:
    """Published state of the player, as seen by observers."""

    current_track: Track | None = None
    is_playing: bool = False
    position: timedelta = field(default_factory=timedelta)
    duration: timedelta | None = None
    processing_state: ProcessingState = ProcessingState.IDLE
    repeat_mode: RepeatMode = RepeatMode.OFF
    repeated_once: bool = False
    shuffle_enabled: bool = False
    sleep_timer_remaining: timedelta | None = None
    up_next: tuple[Track, ...] = ()
    active_sequence: tuple[Track, ...] = ()
    """The playlist in playback order (shuffled order while shuffle is on)."""
    error: str | None = None

    @property
    def has_session(self) -> bool:
        return self.current_track is not None


@dataclass(frozen=True, slots=True)
class PlaybackResult[T]:
    """Result of a playback command."""

    status: PlaybackResultStatus
    message: str
    data: T | None = None

    @property
    def is_success(self) -> bool:
        """Check if the operation was successful."""
        return self.status is PlaybackResultStatus.SUCCESS
