import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Optional

import cv2
import numpy as np

from .frame_data import Frame

logger = logging.getLogger(__name__)


def scale_image(image: np.ndarray, scale: float = 0.5) -> np.ndarray:
    """Downscale a BGR frame for display or storage."""
    if image is None or image.size == 0:
        raise ValueError("empty frame")
    return cv2.resize(image, None, fx=scale, fy=scale, interpolation=cv2.INTER_AREA)


class SnapshotCapture:
    """
    Produces the alert still from the triggering frame.

    Work runs on a single background worker so the admission gate is
    released without waiting on it; captures complete in trigger order.
    """

    def __init__(self, scale: float = 0.5, executor: Optional[Executor] = None):
        self.scale = scale
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="snapshot")
        self._closed = False

    def capture(self, frame: Frame, on_done: Callable[[np.ndarray], None]) -> Optional[Future]:
        if self._closed:
            return None
        return self._executor.submit(self._capture, frame, on_done)

    def _capture(self, frame: Frame, on_done: Callable[[np.ndarray], None]):
        try:
            image = scale_image(frame.image, self.scale)
        except (cv2.error, ValueError, AttributeError):
            logger.warning("Could not capture alert snapshot", exc_info=True)
            return None
        on_done(image)
        return image

    def close(self):
        """Waits for pending captures; later captures are ignored."""
        if self._closed:
            return
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True)
