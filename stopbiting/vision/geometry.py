from typing import Iterable, Optional, Sequence, Tuple

from .frame_data import FaceObservation, HandObservation, MouthRegion, Point, Rect


def mouth_region_from_face(face: FaceObservation) -> Optional[MouthRegion]:
    """
    Bounding rectangle of the mouth contour, moved from face-box offsets
    into image coordinates (point * box_size + box_origin).
    Returns None when the face carries no mouth landmarks.
    """
    if not face.mouth_contour:
        return None

    box = face.bounding_box
    points = [
        Point(p.x * box.width + box.x, p.y * box.height + box.y)
        for p in face.mouth_contour
    ]
    return Rect.from_points(points)


def fingertip_sets(hands: Iterable[HandObservation], min_confidence: float) -> Tuple[Tuple[Point, ...], ...]:
    """Keep fingertips above `min_confidence`; hands left with none are dropped."""
    sets = []
    for hand in hands:
        points = tuple(tip.point for tip in hand.fingertips if tip.confidence > min_confidence)
        if points:
            sets.append(points)
    return tuple(sets)


def hand_in_mouth(mouth_region: Optional[MouthRegion], hands: Sequence[Sequence[Point]]) -> bool:
    if mouth_region is None:
        return False
    return any(mouth_region.contains(point) for points in hands for point in points)
