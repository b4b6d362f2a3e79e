"""Playback sequencing package."""

from .models import (
    LoopMode,
    PlaybackResult,
    PlaybackResultStatus,
    PlaybackSession,
    PlaybackSnapshot,
    ProcessingState,
    RepeatMode,
    Track,
    TrackId,
)
from .playlist import PlaylistStore, RepeatModeController, ShuffleController
from .engine import InMemoryAudioEngine
from .loader import load_tracks
from .protocols import AudioEngineProtocol
from .service import (
    PlaybackEventHandlers,
    PlaybackOrchestrator,
    SleepTimer,
    StateBroadcaster,
)

__all__ = [
    "AudioEngineProtocol",
    "InMemoryAudioEngine",
    "LoopMode",
    "PlaybackEventHandlers",
    "PlaybackOrchestrator",
    "PlaybackResult",
    "PlaybackResultStatus",
    "PlaybackSession",
    "PlaybackSnapshot",
    "PlaylistStore",
    "ProcessingState",
    "RepeatMode",
    "RepeatModeController",
    "ShuffleController",
    "SleepTimer",
    "StateBroadcaster",
    "Track",
    "TrackId",
    "load_tracks",
]
