import logging
import os
import signal
import sys
import time
from typing import List, Optional

import cv2
from PySide6.QtCore import QCoreApplication, QObject, QTimer, Signal, Slot

from stopbiting.core.config import MonitorConfig
from stopbiting.vision.camera_service import CameraService
from stopbiting.vision.frame_data import DetectionState
from stopbiting.vision.landmarks import MediaPipeLandmarker
from stopbiting.vision.monitor import HandMouthMonitor

logger = logging.getLogger(__name__)


class StateBridge(QObject):
    """Re-emits state snapshots as a Qt signal, delivered on the receiver's thread."""
    changed = Signal(object)

    def publish(self, state: DetectionState):
        self.changed.emit(state)


class StatusReporter(QObject):
    """Presentation side: logs transitions and stores alert snapshots."""

    def __init__(self, snapshot_dir: Optional[str] = None, parent=None):
        super().__init__(parent)
        self.snapshot_dir = snapshot_dir
        self.previous = DetectionState()
        self.saved = []

    @Slot(object)
    def on_state(self, state: DetectionState):
        previous, self.previous = self.previous, state

        if state.mouth_detected != previous.mouth_detected:
            logger.info("Face %s", "acquired" if state.mouth_detected else "lost")
        if state.hand_in_mouth != previous.hand_in_mouth:
            logger.info("Alert %s", "ON" if state.hand_in_mouth else "off")

        snapshot = state.last_alert_snapshot
        if snapshot is not None and snapshot is not previous.last_alert_snapshot:
            self.save_snapshot(snapshot)

    def save_snapshot(self, image) -> Optional[str]:
        if not self.snapshot_dir:
            return None
        os.makedirs(self.snapshot_dir, exist_ok=True)
        stamp = time.strftime("%Y%m%d-%H%M%S")
        path = os.path.join(self.snapshot_dir, f"alert-{stamp}-{len(self.saved)}.png")
        if not cv2.imwrite(path, image):
            logger.warning("Could not write snapshot to %s", path)
            return None
        self.saved.append(path)
        logger.info("Snapshot saved: %s", path)
        return path


class AppCore:
    def __init__(self, argv: Optional[List[str]] = None):
        argv = list(sys.argv if argv is None else argv)
        self.config = MonitorConfig.from_args(argv[1:])
        logging.basicConfig(
            level=self.config.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        self.app = QCoreApplication.instance() or QCoreApplication(argv[:1])
        self.monitor = None

        try:
            self.camera = CameraService(
                camera_index=self.config.camera_index,
                resolution=self.config.resolution,
                mirror=self.config.mirror,
            )
        except RuntimeError as e:
            logger.error("Camera error: %s", e)
            self.camera = None
            return

        landmarker = MediaPipeLandmarker(max_hands=self.config.max_hands)
        self.monitor = HandMouthMonitor(self.camera, landmarker, self.config)

        self.bridge = StateBridge()
        self.reporter = StatusReporter(self.config.snapshot_dir)
        self.bridge.changed.connect(self.reporter.on_state)
        self.monitor.state.subscribe(self.bridge.publish)

        self.app.aboutToQuit.connect(self.monitor.cleanup)
        signal.signal(signal.SIGINT, lambda *_: self.app.quit())
        # Lets the interpreter run the SIGINT handler while Qt owns the loop
        self._signal_timer = QTimer()
        self._signal_timer.timeout.connect(lambda: None)
        self._signal_timer.start(250)

    def run(self) -> int:
        if self.monitor is None:
            return 1
        self.monitor.start()
        return self.app.exec()


def main(argv: Optional[List[str]] = None) -> int:
    core = AppCore(argv)
    return core.run()


if __name__ == "__main__":
    sys.exit(main())
