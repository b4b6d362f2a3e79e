"""Events published by the audio engine and the state broadcaster."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from .base_event import BaseEvent

if TYPE_CHECKING:
    from api.playback.models import PlaybackSnapshot, ProcessingState, TrackId


@dataclass(frozen=True)
class PlaybackStateChangedEvent(BaseEvent):
    """Engine playing flag and processing state changed.

    ``track_id`` names the source the state belongs to. For ``COMPLETED`` it
    is the track that reached its end, which may already have been replaced.
    """

    playing: bool
    processing_state: ProcessingState
    track_id: TrackId | None = None


@dataclass(frozen=True)
class PositionChangedEvent(BaseEvent):
    position: timedelta


@dataclass(frozen=True)
class DurationChangedEvent(BaseEvent):
    duration: timedelta | None


@dataclass(frozen=True)
class PlaybackErrorEvent(BaseEvent):
    """Engine reported a failure outside of a command (e.g. decode error)."""

    message: str


@dataclass(frozen=True)
class SessionStateChangedEvent(BaseEvent):
    """A new snapshot was published by the broadcaster."""

    snapshot: PlaybackSnapshot
