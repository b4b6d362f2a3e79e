"""Wiring of the playback object graph."""

import logging
import random

from api.playback.engine import InMemoryAudioEngine
from api.playback.playlist import PlaylistStore, RepeatModeController, ShuffleController
from api.playback.protocols import AudioEngineProtocol
from api.playback.service import (
    PlaybackEventHandlers,
    PlaybackOrchestrator,
    SleepTimer,
    StateBroadcaster,
)
from events.event_bus import EventBus

from .container import Container

logger = logging.getLogger(__name__)


def build_container(
    engine: AudioEngineProtocol | None = None,
    *,
    event_bus: EventBus | None = None,
    rng: random.Random | None = None,
    sleep_tick_interval: float | None = None,
) -> Container:
    """Register every playback component.

    Without an explicit engine the in-memory engine is used. A custom engine
    must publish its events on the same ``EventBus`` that is passed here.
    Event handlers are subscribed before the container is returned.
    """
    container = Container()

    container.register_instance(EventBus, event_bus or EventBus())
    if engine is None:
        container.register(AudioEngineProtocol, InMemoryAudioEngine)  # pyright: ignore[reportArgumentType]
    else:
        container.register_instance(AudioEngineProtocol, engine)  # pyright: ignore[reportArgumentType]

    container.register(PlaylistStore, factory=lambda _: PlaylistStore(rng))
    container.register(RepeatModeController)
    container.register(ShuffleController)
    container.register(SleepTimer, factory=lambda _: SleepTimer(sleep_tick_interval))
    container.register(StateBroadcaster)
    container.register(PlaybackOrchestrator)
    container.register(PlaybackEventHandlers)

    container.resolve(PlaybackEventHandlers).setup()
    logger.debug("Playback container ready: %r", container)
    return container
