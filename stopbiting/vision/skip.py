import random
import time
from typing import Callable, Optional

from .frame_data import DetectionState


class AdaptiveSkip:
    """
    Drops most admitted frames while the face has only just been lost.

    With no mouth in the last pass and a face seen less than `timeout`
    seconds ago, roughly one frame in `keep_one_in` is processed. A face
    in view, or a face gone for longer than the timeout, means every frame
    is processed.
    """

    def __init__(self, timeout: float = 10.0, keep_one_in: int = 4,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.timeout = timeout
        self.keep_one_in = keep_one_in
        self.rng = rng or random.Random()
        self.clock = clock

    def in_reduced_window(self, state: DetectionState) -> bool:
        if state.mouth_detected or state.last_face_seen_at is None:
            return False
        return self.clock() - state.last_face_seen_at < self.timeout

    def should_process(self, state: DetectionState) -> bool:
        if not self.in_reduced_window(state):
            return True
        return self.rng.randrange(self.keep_one_in) == 0
