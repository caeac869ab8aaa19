import numpy as np

from stopbiting.vision.frame_data import Frame
from stopbiting.vision.snapshot import SnapshotCapture, scale_image
from stopbiting.vision.testing import InlineExecutor


def test_scale_image_halves_dimensions():
    image = np.zeros((480, 640, 3), dtype=np.uint8)
    assert scale_image(image, 0.5).shape == (240, 320, 3)


def test_capture_delivers_scaled_image(frame):
    captured = []
    capture = SnapshotCapture(scale=0.5, executor=InlineExecutor())

    capture.capture(frame, captured.append)

    assert len(captured) == 1
    assert captured[0].shape == (4, 6, 3)


def test_capture_runs_in_background_and_close_waits(frame):
    captured = []
    capture = SnapshotCapture(scale=0.5)

    future = capture.capture(frame, captured.append)
    capture.close()

    assert future.done()
    assert len(captured) == 1


def test_undecodable_frame_is_not_delivered():
    captured = []
    capture = SnapshotCapture(executor=InlineExecutor())
    bad = Frame(image=np.zeros((0, 0, 3), dtype=np.uint8), timestamp=0.0)

    future = capture.capture(bad, captured.append)

    assert future.result() is None
    assert captured == []


def test_capture_after_close_is_ignored(frame):
    captured = []
    capture = SnapshotCapture()
    capture.close()
    capture.close()

    assert capture.capture(frame, captured.append) is None
    assert captured == []
