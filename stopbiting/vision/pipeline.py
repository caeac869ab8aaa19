import logging
import time
from typing import Callable, List

from .frame_data import FaceObservation, Frame, HandObservation, PassResult
from .geometry import fingertip_sets, mouth_region_from_face

logger = logging.getLogger(__name__)


class DetectionPipeline:
    """
    Two-stage detection for one frame.

    Stage 1 looks for a face and derives the mouth region. Stage 2 (hand
    pose) only runs when stage 1 found a mouth. A failing stage counts as
    "nothing found" for that frame.

    `landmarker` needs `detect_face(frame)` and `detect_hand_pose(frame, max_hands)`.
    """

    def __init__(self, landmarker, fingertip_confidence: float = 0.3, max_hands: int = 1,
                 clock: Callable[[], float] = time.monotonic):
        self.landmarker = landmarker
        self.fingertip_confidence = fingertip_confidence
        self.max_hands = max_hands
        self.clock = clock

    def run(self, frame: Frame) -> PassResult:
        faces = self._detect_faces(frame)
        if not faces:
            logger.debug("No face in frame")
            return PassResult()

        seen_at = self.clock()
        mouth_region = mouth_region_from_face(faces[0])
        if mouth_region is None:
            logger.debug("Face without mouth landmarks")
            return PassResult(face_seen_at=seen_at)

        hands = self._detect_hands(frame)
        tips = fingertip_sets(hands, self.fingertip_confidence)
        logger.debug("Found %d face(s), mouth %s, %d hand(s)", len(faces), mouth_region, len(tips))
        return PassResult(mouth_region=mouth_region, fingertip_sets=tips, face_seen_at=seen_at)

    def _detect_faces(self, frame: Frame) -> List[FaceObservation]:
        try:
            return list(self.landmarker.detect_face(frame))
        except Exception:
            logger.warning("Face landmark request failed", exc_info=True)
            return []

    def _detect_hands(self, frame: Frame) -> List[HandObservation]:
        try:
            hands = list(self.landmarker.detect_hand_pose(frame, max_hands=self.max_hands))
        except Exception:
            logger.warning("Hand pose request failed", exc_info=True)
            return []
        return hands[:self.max_hands]
