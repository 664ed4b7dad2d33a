"""Observer for "content saved" notifications."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from sitecontent.models import SaveEvent

logger = logging.getLogger(__name__)

CONTENT_SAVED = "contentSaved"

SaveListener = Callable[[SaveEvent], None]


class SaveNotifier:
    """Fan-out of SaveEvents to any number of subscribers.

    A subscriber that raises is logged and skipped; the rest still
    receive the event.
    """

    def __init__(self) -> None:
        self._listeners: list[SaveListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: SaveListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            self.unsubscribe(listener)

        return _unsubscribe

    def unsubscribe(self, listener: SaveListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def emit(self, event: SaveEvent) -> None:
        """Deliver *event* to every current subscriber."""
        with self._lock:
            listeners = list(self._listeners)
        logger.debug("%s %s -> %d listener(s)", CONTENT_SAVED, event.to_payload(), len(listeners))
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.warning("%s listener %r failed", CONTENT_SAVED, listener, exc_info=True)
