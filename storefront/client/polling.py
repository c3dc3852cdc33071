# storefront/client/polling.py
import threading
from typing import Callable

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class Poller:
    """
    Calls `fn` every `interval` seconds on a daemon thread.
    No jitter or backoff: a failed tick is logged and the next one runs on schedule.
    stop() ends the timer but does not interrupt a call already in flight.
    """

    def __init__(self, fn: Callable[[], object], interval: float, name: str = "poller"):
        self.fn = fn
        self.interval = interval
        self.name = name
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def start(self, immediate: bool = True):
        if self.running:
            return
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._stop, immediate), name=self.name, daemon=True)
        self._thread.start()
        logger.info(f"{self.name} polling every {self.interval}s")

    def stop(self, timeout: float | None = None):
        self._stop.set()
        if timeout is not None and self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def tick(self):
        try:
            self.fn()
        except Exception:
            logger.exception(f"{self.name} tick failed")

    def _run(self, stop: threading.Event, immediate: bool):
        if immediate:
            self.tick()
        while not stop.wait(self.interval):
            self.tick()
