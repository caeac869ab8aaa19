import logging
from typing import List, Sequence

import cv2
import mediapipe as mp

from .frame_data import FaceObservation, Fingertip, Frame, HandObservation, Point, Rect

logger = logging.getLogger(__name__)

# Face mesh indices of the outer lip contour
OUTER_LIPS = (61, 146, 91, 181, 84, 17, 314, 405, 321, 375,
              291, 409, 270, 269, 267, 0, 37, 39, 40, 185)

# Hand landmark indices of the fingertips
FINGERTIPS = (
    ("thumb", 4),
    ("index", 8),
    ("middle", 12),
    ("ring", 16),
    ("little", 20),
)


def face_from_landmarks(landmarks: Sequence) -> FaceObservation:
    """
    Face mesh landmarks -> FaceObservation.
    The box is the extent of the whole mesh; lip points become offsets within it.
    """
    box = Rect.from_points(Point(lm.x, lm.y) for lm in landmarks)
    if box is None:
        raise ValueError("face without landmarks")

    contour = None
    if box.width > 0 and box.height > 0 and len(landmarks) > max(OUTER_LIPS):
        contour = tuple(
            Point((landmarks[i].x - box.x) / box.width, (landmarks[i].y - box.y) / box.height)
            for i in OUTER_LIPS
        )
    return FaceObservation(bounding_box=box, mouth_contour=contour)


def hand_from_landmarks(landmarks: Sequence, score: float) -> HandObservation:
    # Hands does not score single joints; every tip inherits the hand score
    tips = tuple(
        Fingertip(name, Point(landmarks[i].x, landmarks[i].y), score)
        for name, i in FINGERTIPS
        if i < len(landmarks)
    )
    return HandObservation(fingertips=tips)


class MediaPipeLandmarker:
    def __init__(self, max_hands: int = 1, min_detection_confidence: float = 0.5,
                 min_tracking_confidence: float = 0.5):
        self.mp_face_mesh = mp.solutions.face_mesh
        self.mp_hands = mp.solutions.hands

        self.face_mesh = self.mp_face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=1,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self.hands = self.mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=max_hands,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._closed = False

    def detect_face(self, frame: Frame) -> List[FaceObservation]:
        rgb_frame = cv2.cvtColor(frame.image, cv2.COLOR_BGR2RGB)
        results = self.face_mesh.process(rgb_frame)
        if not results.multi_face_landmarks:
            return []

        faces = [face_from_landmarks(face.landmark) for face in results.multi_face_landmarks]
        logger.debug("Found %d faces", len(faces))
        return faces

    def detect_hand_pose(self, frame: Frame, max_hands: int = 1) -> List[HandObservation]:
        rgb_frame = cv2.cvtColor(frame.image, cv2.COLOR_BGR2RGB)
        results = self.hands.process(rgb_frame)
        if not results.multi_hand_landmarks:
            return []

        handedness = results.multi_handedness or []
        hands = []
        for i, hand_landmarks in enumerate(results.multi_hand_landmarks[:max_hands]):
            score = handedness[i].classification[0].score if i < len(handedness) else 0.0
            hands.append(hand_from_landmarks(hand_landmarks.landmark, score))
        return hands

    def close(self):
        if self._closed:
            return
        self._closed = True
        self.face_mesh.close()
        self.hands.close()
