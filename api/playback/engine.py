"""In-memory audio engine used by the demo runner and the test-suite."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from api.exceptions import EngineError
from events.event_bus import EventBus
from events.playback_events import (
    DurationChangedEvent,
    PlaybackErrorEvent,
    PlaybackStateChangedEvent,
    PositionChangedEvent,
)

from .models import LoopMode, ProcessingState, Track, TrackId

LOGGER = logging.getLogger(__name__)


class InMemoryAudioEngine:
    """Engine that keeps a clock instead of rendering audio.

    Time only moves when ``advance`` or ``complete`` is called, which makes
    playback fully deterministic. Failures can be injected per command name
    or per track id.
    """

    def __init__(self, event_bus: EventBus) -> None:
        self.event_bus = event_bus

        self.current: Track | None = None
        # source of the last play(); outlives set_source until the next play()
        self._started: Track | None = None
        self.position = timedelta()
        self.loop_mode = LoopMode.OFF
        self.processing_state = ProcessingState.IDLE
        self._playing = False

        self.failing_commands: set[str] = set()
        self.failing_sources: set[TrackId] = set()
        self.calls: list[tuple[str, Any]] = []

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def duration(self) -> timedelta | None:
        if self.current is None or not self.current.duration:
            return None
        return self.current.duration

    def _record(self, command: str, arg: Any = None) -> None:
        self.calls.append((command, arg))
        if command in self.failing_commands:
            raise EngineError(f"Engine command '{command}' failed", command=command)

    async def _publish_state(self) -> None:
        await self.event_bus.publish(
            PlaybackStateChangedEvent(
                self._playing,
                self.processing_state,
                self.current.id if self.current else None,
            )
        )

    async def set_source(self, track: Track) -> None:
        self._record("set_source", track.id)
        if track.id in self.failing_sources:
            self.current = None
            self.processing_state = ProcessingState.IDLE
            raise EngineError(
                f"Unable to load media for track {track.id}: {track.audio_url!r}",
                "Track could not be loaded",
                command="set_source",
            )

        LOGGER.debug("Loading source %s (%s)", track.id, track.audio_url)
        self.current = track
        self.position = timedelta()
        self.processing_state = ProcessingState.LOADING
        await self._publish_state()
        self.processing_state = ProcessingState.READY
        await self._publish_state()
        await self.event_bus.publish(DurationChangedEvent(self.duration))
        await self.event_bus.publish(PositionChangedEvent(self.position))

    async def play(self) -> None:
        self._record("play")
        if self.current is None:
            raise EngineError("No source loaded", command="play")
        if self.processing_state is ProcessingState.COMPLETED:
            self.position = timedelta()
            self.processing_state = ProcessingState.READY
        self._started = self.current
        self._playing = True
        await self._publish_state()

    async def pause(self) -> None:
        self._record("pause")
        self._playing = False
        await self._publish_state()

    async def stop(self) -> None:
        self._record("stop")
        self.current = None
        self._started = None
        self._playing = False
        self.position = timedelta()
        self.processing_state = ProcessingState.IDLE
        await self._publish_state()

    async def seek(self, position: timedelta) -> None:
        self._record("seek", position)
        self.position = position
        await self.event_bus.publish(PositionChangedEvent(position))

    async def set_loop_mode(self, mode: LoopMode) -> None:
        self._record("set_loop_mode", mode)
        self.loop_mode = mode

    # --- Simulation ---

    async def advance(self, delta: timedelta) -> None:
        """Move the clock forward, completing the track if it runs out."""
        if self.current is None or not self._playing:
            return
        self.position += delta
        duration = self.duration
        if duration is not None and self.position >= duration:
            await self.complete()
            return
        await self.event_bus.publish(PositionChangedEvent(self.position))

    async def complete(self) -> None:
        """Simulate end-of-media for the most recently started source.

        If a new source was set since that ``play()``, only the completion of
        the old one is reported and the new source is left untouched.
        """
        finished = self._started
        if finished is None:
            return
        if finished is not self.current:
            LOGGER.debug("Source %s ended while another was loading", finished.id)
            await self.event_bus.publish(
                PlaybackStateChangedEvent(False, ProcessingState.COMPLETED, finished.id)
            )
            return
        if self.loop_mode is LoopMode.ONE:
            LOGGER.debug("Looping source %s", finished.id)
            self.position = timedelta()
            await self.event_bus.publish(PositionChangedEvent(self.position))
            return

        self.position = self.duration or self.position
        self._playing = False
        self.processing_state = ProcessingState.COMPLETED
        await self._publish_state()

    async def fail(self, message: str) -> None:
        """Simulate an asynchronous playback failure."""
        self._playing = False
        self.processing_state = ProcessingState.IDLE
        await self.event_bus.publish(PlaybackErrorEvent(message))
        await self._publish_state()
