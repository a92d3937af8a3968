from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Optional, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight:
    """Coalesce concurrent calls that share a key into one execution.

    The first caller for a key runs ``fn``; callers arriving while it is in
    flight block on the same future and get its result (or its exception).
    Once the call settles the key is free again.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._flights: dict[str, Future] = {}

    def do(self, key: str, fn: Callable[[], T]) -> T:
        with self._lock:
            future = self._flights.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._flights[key] = future

        if not leader:
            log.debug("single_flight_joined key=%s", key)
            return future.result()

        try:
            result = fn()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                if self._flights.get(key) is future:
                    del self._flights[key]

    def forget(self, key: str) -> None:
        """Detach a key so the next caller starts a fresh flight."""
        with self._lock:
            self._flights.pop(key, None)


class IntervalTimer:
    """Run ``fn`` every ``interval`` seconds on a daemon thread until stopped."""

    def __init__(self, interval: float, fn: Callable[[], None], name: str = "interval-timer"):
        self.interval = float(interval)
        self.fn = fn
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.fn()
            except Exception:
                log.exception("interval_tick_failed name=%s", self.name)
