"""Batch progress events.

The pipeline announces progress through an :class:`EventBus`.  Payloads are
keyword arguments:

* ``clip.start``          filename, index, total
* ``processor.complete``  processor_id, filename
* ``clip.complete``       filename, index, total, status
* ``batch.complete``      total, cancelled
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator

CLIP_START = "clip.start"
PROCESSOR_COMPLETE = "processor.complete"
CLIP_COMPLETE = "clip.complete"
BATCH_COMPLETE = "batch.complete"

Handler = Callable[..., Any]


class EventBus:
    """Publish/subscribe hub shared by the pipeline's worker threads.

    Handlers run synchronously on whichever thread emits, and an exception
    raised by a handler propagates to the emitter.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, tuple[Handler, ...]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, handler: Handler) -> Callable[[], None]:
        """Register *handler*; returns a callable that removes it again."""
        with self._lock:
            self._handlers[event_type] = self._handlers.get(event_type, ()) + (handler,)
        return lambda: self.unsubscribe(event_type, handler)

    def unsubscribe(self, event_type: str, handler: Handler) -> None:
        with self._lock:
            current = self._handlers.get(event_type, ())
            if handler not in current:
                return
            i = current.index(handler)
            remaining = current[:i] + current[i + 1:]
            if remaining:
                self._handlers[event_type] = remaining
            else:
                del self._handlers[event_type]

    @contextmanager
    def listening(self, event_type: str, handler: Handler) -> Iterator[None]:
        """Keep *handler* subscribed for the duration of a ``with`` block."""
        remove = self.subscribe(event_type, handler)
        try:
            yield
        finally:
            remove()

    def has_handlers(self, event_type: str) -> bool:
        return event_type in self._handlers

    def emit(self, event_type: str, **data: Any) -> None:
        # handler tuples are replaced, never mutated, so no copy under the lock
        for handler in self._handlers.get(event_type, ()):
            handler(**data)
