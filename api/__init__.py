"""API package."""

from api.exceptions import (
    BusinessError,
    EngineError,
    InfrastructureError,
    SequencerError,
)
from api.playback import (
    PlaybackOrchestrator,
    PlaybackResult,
    PlaybackResultStatus,
    PlaybackSnapshot,
    PlaylistStore,
    RepeatMode,
    StateBroadcaster,
    Track,
)

__all__ = [
    "BusinessError",
    "EngineError",
    "InfrastructureError",
    "PlaybackOrchestrator",
    "PlaybackResult",
    "PlaybackResultStatus",
    "PlaybackSnapshot",
    "PlaylistStore",
    "RepeatMode",
    "SequencerError",
    "StateBroadcaster",
    "Track",
]
