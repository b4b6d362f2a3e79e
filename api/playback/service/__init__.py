from .broadcaster import StateBroadcaster
from .event_handlers import PlaybackEventHandlers
from .orchestrator import PlaybackOrchestrator
from .sleep_timer import SleepTimer

__all__ = [
    "PlaybackEventHandlers",
    "PlaybackOrchestrator",
    "SleepTimer",
    "StateBroadcaster",
]
