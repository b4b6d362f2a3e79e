from __future__ import annotations

import logging

from api.playback.models import ProcessingState
from api.playback.service.orchestrator import PlaybackOrchestrator
from events.event_bus import EventBus
from events.playback_events import (
    DurationChangedEvent,
    PlaybackErrorEvent,
    PlaybackStateChangedEvent,
    PositionChangedEvent,
)

logger = logging.getLogger(__name__)


class PlaybackEventHandlers:
    """Routes audio engine events into the orchestrator."""

    def __init__(self, event_bus: EventBus, orchestrator: PlaybackOrchestrator) -> None:
        self.event_bus = event_bus
        self.orchestrator = orchestrator
        self._setup_done = False

    def setup(self) -> None:
        """Register event listeners."""
        if self._setup_done:
            logger.warning("PlaybackEventHandlers setup called multiple times.")
            return

        self.event_bus.subscribe(PlaybackStateChangedEvent, self._on_state_changed)
        self.event_bus.subscribe(PositionChangedEvent, self._on_position_changed)
        self.event_bus.subscribe(DurationChangedEvent, self._on_duration_changed)
        self.event_bus.subscribe(PlaybackErrorEvent, self._on_playback_error)
        self._setup_done = True

    def cleanup(self) -> None:
        """Remove event listeners."""
        if not self._setup_done:
            return

        self.event_bus.unsubscribe(PlaybackStateChangedEvent, self._on_state_changed)
        self.event_bus.unsubscribe(PositionChangedEvent, self._on_position_changed)
        self.event_bus.unsubscribe(DurationChangedEvent, self._on_duration_changed)
        self.event_bus.unsubscribe(PlaybackErrorEvent, self._on_playback_error)
        self._setup_done = False
        logger.info("PlaybackEventHandlers listeners removed.")

    def close(self) -> None:
        self.cleanup()

    async def _on_state_changed(self, event: PlaybackStateChangedEvent) -> None:
        await self.orchestrator.sync_playback_state(
            event.playing, event.processing_state, event.track_id
        )
        if event.processing_state is ProcessingState.COMPLETED:
            logger.debug("Engine reported end of media for %s", event.track_id)
            await self.orchestrator.handle_track_completed(event.track_id)

    async def _on_position_changed(self, event: PositionChangedEvent) -> None:
        await self.orchestrator.sync_position(event.position)

    async def _on_duration_changed(self, event: DurationChangedEvent) -> None:
        await self.orchestrator.sync_duration(event.duration)

    async def _on_playback_error(self, event: PlaybackErrorEvent) -> None:
        await self.orchestrator.handle_engine_error(event.message)
