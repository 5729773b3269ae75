"""Request lifecycle tracker.

Aggregates every in-flight network call into one "loading" flag.
Callers wrap each outbound call in ``tracked()`` so the matching ``stop()``
runs on success, failure and cancellation alike.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List

logger = logging.getLogger(__name__)

Listener = Callable[[int], None]


class RequestTracker:
    """Counts outstanding operations; busy while the count is above zero."""

    def __init__(self) -> None:
        self._active = 0
        self._listeners: List[Listener] = []

    def start(self) -> None:
        self._active += 1
        self._notify()

    def stop(self) -> None:
        if self._active == 0:
            logger.debug("RequestTracker.stop() without matching start(); ignored")
        self._active = max(0, self._active - 1)
        self._notify()

    def is_busy(self) -> bool:
        return self._active > 0

    def active_count(self) -> int:
        return self._active

    @contextmanager
    def tracked(self) -> Iterator[None]:
        self.start()
        try:
            yield
        finally:
            self.stop()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with the new count after every change.

        Returns a function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._active)
            except Exception:
                logger.exception("RequestTracker listener failed")
