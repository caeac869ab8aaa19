import logging
import threading
from contextlib import contextmanager
from typing import Optional

from PySide6.QtCore import QTimer

logger = logging.getLogger(__name__)

MIN_CHECK_INTERVAL = 0.1


class SamplingController:
    """
    Admits at most one frame per timer tick, and never two passes at once.

    A tick marks the next delivered frame as wanted. The frame consumer
    takes it through `admission()`, which clears the in-flight flag on every
    exit path. Ticks that arrive while a pass is in flight, or while the
    source is idle, are dropped.

    The timer is a QTimer, so `start()` and `check_interval` changes belong
    to the Qt thread; `tick()` and `admission()` may be called from anywhere.
    """

    def __init__(self, source, check_interval: float = 2.0):
        self.source = source
        self._check_interval = max(MIN_CHECK_INTERVAL, check_interval)
        self._lock = threading.Lock()
        self._in_flight = False
        self._frame_wanted = False
        self._timer: Optional[QTimer] = None

    @property
    def check_interval(self) -> float:
        return self._check_interval

    @check_interval.setter
    def check_interval(self, seconds: float):
        self._check_interval = max(MIN_CHECK_INTERVAL, float(seconds))
        if self._timer is not None:
            # setInterval restarts an active timer; the gate is left alone
            self._timer.setInterval(self._interval_ms())
        logger.info("Check interval set to %.1fs", self._check_interval)

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    @property
    def is_active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def start(self):
        if self._timer is None:
            self._timer = QTimer()
            self._timer.timeout.connect(self.tick)
        self._timer.start(self._interval_ms())

    def stop(self):
        if self._timer is not None:
            self._timer.stop()

    def tick(self) -> bool:
        """Returns True when the tick admitted a new pass."""
        if not self.source.is_running:
            logger.debug("Skipping tick - source not running")
            return False

        with self._lock:
            if self._in_flight:
                logger.debug("Skipping tick - still processing")
                return False
            self._in_flight = True
            self._frame_wanted = True

        logger.debug("Waiting for next frame")
        return True

    @contextmanager
    def admission(self):
        """
        Yields True if this frame was admitted. The in-flight flag is
        released when the block exits, only for the admitted frame.
        """
        with self._lock:
            admitted = self._frame_wanted
            self._frame_wanted = False
        try:
            yield admitted
        finally:
            if admitted:
                with self._lock:
                    self._in_flight = False

    def _interval_ms(self) -> int:
        return int(round(self._check_interval * 1000))
