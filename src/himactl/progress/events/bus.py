import logging
import threading
from typing import Callable

from himactl.model import ProgressEvent, ProgressEventType

log = logging.getLogger(__name__)


class EventBus:
    """
    thread-safe event bus for progress events, tile workers emit from pool threads.
    """

    def __init__(self):
        self._handlers: list[Callable[[ProgressEvent], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: Callable[[ProgressEvent], None]):
        with self._lock:
            self._handlers.append(handler)

    def unsubscribe(self, handler: Callable[[ProgressEvent], None]):
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def emit(self, event: ProgressEvent):
        with self._lock:
            handlers = self._handlers.copy()

        for handler in handlers:
            handler(event)


# shared by the main thread and the tile worker threads
_global_bus = EventBus()


def get_bus() -> EventBus:
    """
    Get the process-wide event bus.

    Returns:
        EventBus: the bus every emitter and reporter shares.
    """
    return _global_bus


def emit_event(event_type: ProgressEventType, task_id: str, **data):
    event = ProgressEvent(type=event_type, task_id=task_id, data=data)
    get_bus().emit(event)
