import random
from datetime import timedelta

import pytest

from api.playback import Track
from di.container import Container
from events.event_bus import EventBus


@pytest.fixture
def container() -> Container:
    """Provide a fresh DI container for each test."""
    return Container()


@pytest.fixture
def event_bus() -> EventBus:
    """Provide a fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible shuffles."""
    return random.Random(1234)


@pytest.fixture
def abc_tracks() -> list[Track]:
    return [
        Track(id=name, title=f"Track {name}", duration=timedelta(minutes=3))
        for name in "ABC"
    ]
