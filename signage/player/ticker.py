"""Periodic timer running a callback on its own daemon thread."""

import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)


class Ticker:
    """Calls `callback` every `interval` seconds until stopped.

    Each ticker owns its thread, so a slow or failing callback on one ticker
    never delays another. Exceptions from the callback are logged and the
    ticker keeps going.
    """

    def __init__(self, name: str, interval: float, callback: Callable[[], None]):
        self.name = name
        self.interval = interval
        self._callback = callback
        self._stop: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop.is_set()
        )

    def start(self) -> None:
        if self.running:
            return
        # Fresh event per thread: a thread still finishing a callback after a
        # timed-out stop() keeps its own set event and exits afterwards
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop,), daemon=True, name=f"ticker-{self.name}"
        )
        self._thread.start()
        logger.debug("Ticker %s started (every %.1fs)", self.name, self.interval)

    def stop(self, timeout: float = 5.0) -> None:
        if self._stop is not None:
            self._stop.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Ticker %s still inside its callback after %.1fs", self.name, timeout)
        self._thread = None
        logger.debug("Ticker %s stopped", self.name)

    def _run(self, stop: threading.Event) -> None:
        next_at = time.monotonic() + self.interval
        while not stop.wait(max(0.0, next_at - time.monotonic())):
            try:
                self._callback()
            except Exception as e:
                logger.error("Ticker %s callback failed: %s", self.name, e)
            # Fixed-rate schedule; skip missed beats instead of bursting
            next_at = max(next_at + self.interval, time.monotonic())
