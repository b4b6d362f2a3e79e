from __future__ import annotations

import dataclasses
import logging
from typing import Any

from api.playback.models import PlaybackSnapshot
from events.event_bus import EventBus, EventHandler
from events.playback_events import SessionStateChangedEvent

logger = logging.getLogger(__name__)


class StateBroadcaster:
    """Owns the playback snapshot and notifies observers of changes.

    Changes are staged first and delivered by ``flush``. The orchestrator
    stages while it holds its command lock and flushes after releasing it,
    so observers may issue commands from their handlers.
    """

    def __init__(self, event_bus: EventBus) -> None:
        self.event_bus = event_bus
        self._snapshot = PlaybackSnapshot()
        self._published = self._snapshot

    @property
    def snapshot(self) -> PlaybackSnapshot:
        """Latest state, including changes not yet delivered to observers."""
        return self._snapshot

    @property
    def has_pending(self) -> bool:
        return self._snapshot != self._published

    def subscribe(self, handler: EventHandler[SessionStateChangedEvent]) -> None:
        self.event_bus.subscribe(SessionStateChangedEvent, handler)

    def unsubscribe(self, handler: EventHandler[SessionStateChangedEvent]) -> None:
        self.event_bus.unsubscribe(SessionStateChangedEvent, handler)

    def stage(self, **changes: Any) -> PlaybackSnapshot:
        """Apply field changes without notifying anyone."""
        self._snapshot = dataclasses.replace(self._snapshot, **changes)
        return self._snapshot

    def reset(self, **keep: Any) -> PlaybackSnapshot:
        """Stage an empty snapshot, carrying over the given fields."""
        self._snapshot = dataclasses.replace(PlaybackSnapshot(), **keep)
        return self._snapshot

    async def flush(self) -> PlaybackSnapshot:
        """Deliver the current snapshot if it differs from the last delivered one."""
        snapshot = self._snapshot
        if snapshot == self._published:
            return snapshot
        self._published = snapshot
        await self.event_bus.publish(SessionStateChangedEvent(snapshot))
        return snapshot

    async def publish(self, **changes: Any) -> PlaybackSnapshot:
        """Stage ``changes`` and deliver them right away."""
        self.stage(**changes)
        return await self.flush()
