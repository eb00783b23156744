"""Periodic runner for health-check passes."""

from dataclasses import dataclass, field
import threading
import time
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class PassScheduler:
    """Runs ``run_pass`` immediately and then every ``interval`` seconds.

    Passes run one after another on a single thread, so they never overlap.
    When a pass takes longer than the interval the next one starts as soon as
    it returns; missed ticks are dropped rather than queued.
    """

    run_pass: Callable[[], Any]
    interval: float
    last_result: Any = None
    pass_count: int = 0
    thread: Optional[threading.Thread] = None
    _stop: threading.Event = field(default_factory=threading.Event, repr=False)

    @property
    def running(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def _run_once(self) -> None:
        try:
            self.last_result = self.run_pass()
        except Exception:  # safety net
            logger.exception("Health check pass failed unexpectedly")
        self.pass_count += 1

    def run_forever(self) -> None:
        """Run passes on the current thread until :meth:`stop` is called."""
        while not self._stop.is_set():
            start = time.monotonic()
            self._run_once()
            elapsed = time.monotonic() - start
            if elapsed > self.interval:
                logger.warning(
                    "Health check pass took %.1fs, longer than the %.1fs interval",
                    elapsed,
                    self.interval,
                )
            wait_time = max(0, self.interval - elapsed)
            self._stop.wait(wait_time)

    def start(self) -> None:
        """Start running passes in a background thread."""
        if self.running:
            return
        self._stop.clear()
        t = threading.Thread(target=self.run_forever, daemon=True)
        self.thread = t
        t.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self.thread:
            self.thread.join(timeout)
