import asyncio
import logging
import time
from collections import defaultdict
from collections.abc import Callable, Coroutine
from typing import Any

from .base_event import BaseEvent

logger = logging.getLogger(__name__)

type EventHandler[E: BaseEvent] = Callable[[E], Coroutine[Any, Any, None]]


def _handler_name(handler: Callable[..., Any]) -> str:
    return getattr(handler, "__qualname__", None) or getattr(
        handler, "__name__", repr(handler)
    )


class EventBus:
    """Asynchronous Event Bus with telemetry support."""

    def __init__(self) -> None:
        self._subscribers: dict[type[BaseEvent], list[EventHandler[Any]]] = (
            defaultdict(list)
        )
        self._metrics: dict[str, int] = defaultdict(int)
        self._latencies: dict[str, list[float]] = defaultdict(list)

    def subscribe[E: BaseEvent](
        self, event_type: type[E], handler: EventHandler[E]
    ) -> None:
        """Subscribe a handler to an event type."""
        self._subscribers[event_type].append(handler)
        logger.debug(
            "Subscribed %s to %s", _handler_name(handler), event_type.__name__
        )

    def unsubscribe[E: BaseEvent](
        self, event_type: type[E], handler: EventHandler[E]
    ) -> bool:
        """Remove a handler. Returns False if it was not subscribed."""
        handlers = self._subscribers.get(event_type, [])
        try:
            handlers.remove(handler)
        except ValueError:
            return False
        logger.debug(
            "Unsubscribed %s from %s", _handler_name(handler), event_type.__name__
        )
        return True

    def has_subscribers(self, event_type: type[BaseEvent]) -> bool:
        return bool(self._subscribers.get(event_type))

    async def publish(self, event: BaseEvent) -> None:
        """Publish an event to all subscribers.

        Handlers are executed concurrently using asyncio.TaskGroup and the call
        returns once all of them have finished.
        """
        handlers = list(self._subscribers.get(type(event), []))

        if not handlers:
            logger.debug("No handlers for %s", event.event_name)
            return

        self._metrics[f"event_published.{event.event_name}"] += 1

        start_time = time.perf_counter()

        try:
            async with asyncio.TaskGroup() as tg:
                for handler in handlers:
                    tg.create_task(self._process_handler(handler, event))
        except Exception:
            logger.exception("Error publishing event %s", event.event_name)
            self._metrics[f"event_error.{event.event_name}"] += 1
        finally:
            duration = (time.perf_counter() - start_time) * 1000
            self._latencies[event.event_name].append(duration)
            # Keep latency list size manageable
            if len(self._latencies[event.event_name]) > 100:
                self._latencies[event.event_name].pop(0)

    async def _process_handler(
        self, handler: EventHandler[Any], event: BaseEvent
    ) -> None:
        name = _handler_name(handler)
        try:
            await handler(event)
            self._metrics[f"handler_success.{name}"] += 1
        except Exception:
            logger.exception("Error in handler %s for %s", name, event.event_name)
            self._metrics[f"handler_error.{name}"] += 1

    def get_metrics(self) -> dict[str, Any]:
        """Return a snapshot of current metrics."""
        avg_latencies = {k: sum(v) / len(v) for k, v in self._latencies.items() if v}
        return {"counts": dict(self._metrics), "avg_latency_ms": avg_latencies}
