import pytest

from stopbiting.vision.testing import FakeLandmarker, FakeSource, make_frame


@pytest.fixture
def frame():
    return make_frame()


@pytest.fixture
def landmarker():
    return FakeLandmarker()


@pytest.fixture
def source():
    return FakeSource()
