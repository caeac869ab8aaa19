import logging
import random
import time
from concurrent.futures import Executor
from typing import Callable, Optional

from stopbiting.core.config import MonitorConfig

from .frame_data import DetectionState, Frame
from .pipeline import DetectionPipeline
from .sampler import SamplingController
from .skip import AdaptiveSkip
from .snapshot import SnapshotCapture
from .state import DetectionStateStore

logger = logging.getLogger(__name__)


class HandMouthMonitor:
    """
    Watches a frame source for fingertips entering the mouth region.

    Other modules talk to the monitor only: `state` for the published
    DetectionState, `check_interval` for the cadence, `start()`/`cleanup()`
    for the lifecycle.
    """

    def __init__(self, source, landmarker, config=None,
                 rng: Optional[random.Random] = None,
                 clock: Callable[[], float] = time.monotonic,
                 snapshot_executor: Optional[Executor] = None):
        if config is None:
            config = MonitorConfig()

        self.source = source
        self.landmarker = landmarker
        self.config = config

        self.state = DetectionStateStore()
        self.sampler = SamplingController(source, config.check_interval)
        self.skip = AdaptiveSkip(config.face_timeout, config.keep_one_in, rng=rng, clock=clock)
        self.pipeline = DetectionPipeline(
            landmarker,
            fingertip_confidence=config.fingertip_confidence,
            max_hands=config.max_hands,
            clock=clock,
        )
        self.snapshots = SnapshotCapture(config.snapshot_scale, executor=snapshot_executor)

        self._cleaned_up = False

    @property
    def check_interval(self) -> float:
        return self.sampler.check_interval

    @check_interval.setter
    def check_interval(self, seconds: float):
        self.sampler.check_interval = seconds

    def snapshot(self) -> DetectionState:
        return self.state.snapshot()

    def start(self):
        logger.info("Starting monitor (every %.1fs)", self.check_interval)
        self.source.start(self.on_frame)
        self.sampler.start()

    def on_frame(self, frame: Frame):
        """Frame consumer; runs on the source's delivery thread."""
        with self.sampler.admission() as admitted:
            if not admitted:
                return

            current = self.state.snapshot()
            logger.debug(
                "Processing frame: mouth=%s hands=%d",
                current.mouth_detected, len(current.fingertip_sets),
            )
            if not self.skip.should_process(current):
                logger.debug("Face recently lost, frame discarded")
                return

            result = self.pipeline.run(frame)
            if self.state.commit(result):
                self.snapshots.capture(frame, self.state.set_alert_snapshot)

    def cleanup(self):
        if self._cleaned_up:
            return
        self._cleaned_up = True
        logger.info("Cleaning up resources...")

        self.sampler.stop()
        if self.source.stop():
            self.source.release()
            self.landmarker.close()
        else:
            # Inference may still be running on the frame thread
            logger.warning("Frame source did not stop; landmarker left open")
        self.snapshots.close()
        logger.info("Cleanup complete")
