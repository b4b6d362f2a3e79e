"""Protocols for the playback module."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import LoopMode, Track


class AudioEngineProtocol(Protocol):
    """Single-track audio engine driven by the orchestrator.

    Commands raise ``EngineError`` on failure. State changes are published as
    events on the shared ``EventBus``. A ``COMPLETED`` state must carry the id
    of the track that ended and must never be published from inside a
    command coroutine: the orchestrator handles it under the same lock that
    serializes commands.
    """

    @property
    def is_playing(self) -> bool: ...

    async def set_source(self, track: Track) -> None: ...
    async def play(self) -> None: ...
    async def pause(self) -> None: ...
    async def stop(self) -> None: ...
    async def seek(self, position: timedelta) -> None: ...
    async def set_loop_mode(self, mode: LoopMode) -> None: ...
