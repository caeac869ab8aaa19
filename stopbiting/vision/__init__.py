from .frame_data import DetectionState, FaceObservation, Fingertip, Frame, HandObservation, Point, Rect
from .monitor import HandMouthMonitor

__all__ = [
    "DetectionState",
    "FaceObservation",
    "Fingertip",
    "Frame",
    "HandObservation",
    "HandMouthMonitor",
    "Point",
    "Rect",
]
