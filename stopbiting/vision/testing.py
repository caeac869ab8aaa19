"""Fakes for exercising the monitor without a camera or models.

FakeLandmarker and FakeSource stand in for the MediaPipe landmarker and
the OpenCV camera service; InlineExecutor makes snapshot capture
synchronous; FakeClock replaces time.monotonic.
"""

from concurrent.futures import Executor, Future

import numpy as np

from .frame_data import FaceObservation, Fingertip, Frame, HandObservation, Point, Rect

# Face box (0.3, 0.3, 0.2, 0.1); the contour bounds to (0.35, 0.32, 0.08, 0.03)
SCENARIO_FACE = FaceObservation(
    bounding_box=Rect(0.3, 0.3, 0.2, 0.1),
    mouth_contour=(Point(0.25, 0.2), Point(0.65, 0.2), Point(0.65, 0.5), Point(0.25, 0.5), Point(0.45, 0.35)),
)


def make_hand(*points, confidence=0.9):
    names = ["thumb", "index", "middle", "ring", "little"]
    return HandObservation(fingertips=tuple(
        Fingertip(name, Point(*p), confidence) for name, p in zip(names, points)
    ))


class FakeLandmarker:
    def __init__(self, faces=(), hands=()):
        self.faces = list(faces)
        self.hands = list(hands)
        self.face_error = None
        self.hand_error = None
        self.face_calls = 0
        self.hand_calls = 0
        self.max_hands_seen = []
        self.closed = 0

    def detect_face(self, frame):
        self.face_calls += 1
        if self.face_error is not None:
            raise self.face_error
        return list(self.faces)

    def detect_hand_pose(self, frame, max_hands=1):
        self.hand_calls += 1
        self.max_hands_seen.append(max_hands)
        if self.hand_error is not None:
            raise self.hand_error
        return list(self.hands)

    def close(self):
        self.closed += 1


class FakeSource:
    def __init__(self, running=True):
        self.is_running = running
        self.stops_cleanly = True
        self.on_frame = None
        self.stopped = 0
        self.released = 0

    def start(self, on_frame):
        self.on_frame = on_frame

    def stop(self):
        self.stopped += 1
        return self.stops_cleanly

    def release(self):
        self.released += 1


class InlineExecutor(Executor):
    """Runs submitted work immediately on the caller's thread."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_frame(width=12, height=8, timestamp=0.0):
    image = np.full((height, width, 3), 128, dtype=np.uint8)
    return Frame(image=image, timestamp=timestamp)
