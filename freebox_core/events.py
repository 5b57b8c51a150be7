"""Status change broadcasting for observers (UI, logging)."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

from .models import StatusEvent

_LOGGER = logging.getLogger(__name__)

MAX_HISTORY = 100

StatusCallback = Callable[[StatusEvent], None]


class StatusEmitter:
    """Broadcast status events to registered callbacks.

    Callbacks run synchronously in registration order. A callback may
    subscribe to a single event or, with ``event=None``, to all of them.
    A failing callback is logged and does not stop delivery to the others.

    Usage:
        emitter = StatusEmitter()
        unsubscribe = emitter.subscribe(handler, StatusEvent.SESSION_OPENED)
        emitter.emit(StatusEvent.SESSION_OPENED)
        unsubscribe()
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[StatusEvent | None, StatusCallback]] = []
        self._history: deque[StatusEvent] = deque(maxlen=MAX_HISTORY)

    def subscribe(
        self, callback: StatusCallback, event: StatusEvent | None = None
    ) -> Callable[[], None]:
        """Register a callback and return a function that removes it."""
        entry = (event, callback)
        self._subscribers.append(entry)

        def _unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return _unsubscribe

    def emit(self, event: StatusEvent) -> None:
        """Deliver an event to every matching subscriber."""
        _LOGGER.debug("Status event: %s", event.value)
        self._history.append(event)

        for wanted, callback in list(self._subscribers):
            if wanted is not None and wanted is not event:
                continue
            try:
                callback(event)
            except Exception as err:
                _LOGGER.exception("Status callback error for %s: %s", event.value, err)

    @property
    def history(self) -> list[StatusEvent]:
        """Recently emitted events, oldest first."""
        return list(self._history)

    @property
    def last(self) -> StatusEvent | None:
        return self._history[-1] if self._history else None
