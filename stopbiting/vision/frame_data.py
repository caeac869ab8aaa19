from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Optional, Tuple

import numpy as np


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in normalized image coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def contains(self, point: Point) -> bool:
        # Edges count as inside
        return self.x <= point.x <= self.max_x and self.y <= point.y <= self.max_y

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> Optional["Rect"]:
        points = list(points)
        if not points:
            return None
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


# Mouth region shares the coordinate space of the fingertip points
MouthRegion = Rect


@dataclass(frozen=True)
class Frame:
    # BGR image as delivered by OpenCV; valid for one pipeline pass
    image: np.ndarray
    timestamp: float


@dataclass(frozen=True)
class FaceObservation:
    bounding_box: Rect
    # Outer-lip points, normalized to the bounding box
    mouth_contour: Optional[Tuple[Point, ...]] = None


class Fingertip(NamedTuple):
    name: str
    point: Point
    confidence: float


@dataclass(frozen=True)
class HandObservation:
    # Thumb, index, middle, ring, little (whatever the model reported)
    fingertips: Tuple[Fingertip, ...] = ()


@dataclass(frozen=True)
class PassResult:
    """Per-frame output of the detection pipeline."""
    mouth_region: Optional[MouthRegion] = None
    fingertip_sets: Tuple[Tuple[Point, ...], ...] = ()
    face_seen_at: Optional[float] = None

    @property
    def mouth_detected(self) -> bool:
        return self.mouth_region is not None


@dataclass(frozen=True)
class DetectionState:
    # Published as a whole; never mutated in place
    mouth_detected: bool = False
    mouth_region: Optional[MouthRegion] = None
    fingertip_sets: Tuple[Tuple[Point, ...], ...] = ()
    hand_in_mouth: bool = False
    last_face_seen_at: Optional[float] = None
    last_alert_snapshot: Optional[np.ndarray] = field(default=None, compare=False, repr=False)
