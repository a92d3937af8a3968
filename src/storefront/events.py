from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Callable

log = logging.getLogger(__name__)

AUTH_LOGOUT = "auth:logout"

Listener = Callable[[], None]


class SignalBus:
    """In-process named signals; the API client fires, the session listens."""

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, name: str, listener: Listener) -> None:
        with self._lock:
            if listener not in self._listeners[name]:
                self._listeners[name].append(listener)

    def unsubscribe(self, name: str, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners[name]:
                self._listeners[name].remove(listener)

    def listener_count(self, name: str) -> int:
        with self._lock:
            return len(self._listeners[name])

    def emit(self, name: str) -> None:
        with self._lock:
            listeners = list(self._listeners[name])
        log.info("signal_emitted name=%s listeners=%s", name, len(listeners))
        for listener in listeners:
            listener()
