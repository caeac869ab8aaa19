import logging
import threading
import time
from typing import Callable, Optional

import cv2

from .frame_data import Frame

logger = logging.getLogger(__name__)


class CameraService:
    def __init__(self, camera_index: int = 0, resolution: tuple = (640, 480), mirror: bool = False):
        self.cap = cv2.VideoCapture(camera_index)
        if not self.cap.isOpened():
            raise RuntimeError(f"Could not open camera {camera_index}")

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, resolution[0])
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, resolution[1])
        # Keep only the newest frame so late frames are dropped, not queued
        self.cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        self.mirror = mirror
        self.retry_delay = 0.1

        self._running = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._running.is_set() and self._thread is not None and self._thread.is_alive()

    def start(self, on_frame: Callable[[Frame], None]):
        """Start delivering frames to `on_frame` on a background thread."""
        if self.is_running:
            return
        self._running.set()
        self._thread = threading.Thread(target=self._read_loop, args=(on_frame,),
                                        name="camera", daemon=True)
        self._thread.start()
        logger.info("Camera session started")

    def _read_loop(self, on_frame: Callable[[Frame], None]):
        while self._running.is_set():
            ret, image = self.cap.read()
            if not ret:
                logger.warning("Camera returned no frame")
                time.sleep(self.retry_delay)
                continue

            if self.mirror:
                image = cv2.flip(image, 1)

            try:
                on_frame(Frame(image=image, timestamp=time.monotonic()))
            except Exception:
                logger.exception("Frame consumer failed")

    def stop(self, timeout: float = 2.0) -> bool:
        """Returns True once the reader thread has exited."""
        self._running.clear()
        thread = self._thread
        if thread is None:
            return True
        if thread is threading.current_thread():
            return False

        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning("Camera thread still busy after %.1fs", timeout)
            return False
        self._thread = None
        return True

    def release(self):
        if not self.stop():
            # Reader may still be inside cap.read()
            return
        if self.cap.isOpened():
            self.cap.release()

    def __del__(self):
        if hasattr(self, "_running"):
            self.release()
