import random
import threading
from unittest import mock

import numpy as np
import pytest

from stopbiting.core.config import MonitorConfig
from stopbiting.vision.frame_data import Frame
from stopbiting.vision.monitor import HandMouthMonitor
from stopbiting.vision.testing import SCENARIO_FACE, FakeClock, InlineExecutor, make_hand

INSIDE = make_hand((0.37, 0.33))
OUTSIDE = make_hand((0.1, 0.1))


class RejectAll(random.Random):
    def randrange(self, *args, **kwargs):
        return 1


def make_monitor(source, landmarker, **kwargs):
    kwargs.setdefault("snapshot_executor", InlineExecutor())
    return HandMouthMonitor(source, landmarker, MonitorConfig(), **kwargs)


def run_pass(monitor, frame):
    assert monitor.sampler.tick()
    monitor.on_frame(frame)


def test_finger_in_mouth_raises_alert_and_captures(source, landmarker, frame):
    landmarker.faces = [SCENARIO_FACE]
    landmarker.hands = [INSIDE]
    monitor = make_monitor(source, landmarker)

    run_pass(monitor, frame)

    state = monitor.snapshot()
    assert state.mouth_detected
    assert state.hand_in_mouth
    assert state.last_alert_snapshot.shape == (4, 6, 3)


def test_finger_away_from_mouth_stays_quiet(source, landmarker, frame):
    landmarker.faces = [SCENARIO_FACE]
    landmarker.hands = [OUTSIDE]
    monitor = make_monitor(source, landmarker)

    with mock.patch.object(monitor.snapshots, "capture") as capture:
        run_pass(monitor, frame)

    assert monitor.snapshot().mouth_detected
    assert not monitor.snapshot().hand_in_mouth
    capture.assert_not_called()


def test_capture_fires_once_per_contact(source, landmarker, frame):
    landmarker.faces = [SCENARIO_FACE]
    monitor = make_monitor(source, landmarker)

    with mock.patch.object(monitor.snapshots, "capture", wraps=monitor.snapshots.capture) as capture:
        for in_mouth in [False, True, True, True, False, True]:
            landmarker.hands = [INSIDE if in_mouth else OUTSIDE]
            run_pass(monitor, frame)

    assert capture.call_count == 2


def test_losing_face_clears_alert(source, landmarker, frame):
    landmarker.faces = [SCENARIO_FACE]
    landmarker.hands = [INSIDE]
    monitor = make_monitor(source, landmarker)
    run_pass(monitor, frame)

    landmarker.faces = []
    run_pass(monitor, frame)

    state = monitor.snapshot()
    assert not state.mouth_detected
    assert state.mouth_region is None
    assert not state.hand_in_mouth
    assert state.last_alert_snapshot is not None


def test_no_face_never_asks_for_hands(source, landmarker, frame):
    monitor = make_monitor(source, landmarker)

    for _ in range(5):
        run_pass(monitor, frame)

    assert landmarker.face_calls == 5
    assert landmarker.hand_calls == 0


def test_discarded_frame_releases_gate(source, landmarker, frame):
    clock = FakeClock(0.0)
    landmarker.faces = [SCENARIO_FACE]
    monitor = make_monitor(source, landmarker, rng=RejectAll(), clock=clock)
    run_pass(monitor, frame)

    landmarker.faces = []
    clock.advance(1.0)
    run_pass(monitor, frame)
    assert landmarker.face_calls == 2

    clock.advance(1.0)
    run_pass(monitor, frame)

    assert landmarker.face_calls == 2
    assert not monitor.sampler.in_flight


def test_full_rate_after_face_timeout(source, landmarker, frame):
    clock = FakeClock(0.0)
    landmarker.faces = [SCENARIO_FACE]
    monitor = make_monitor(source, landmarker, rng=RejectAll(), clock=clock)
    run_pass(monitor, frame)
    landmarker.faces = []
    run_pass(monitor, frame)

    clock.advance(11.0)
    for _ in range(20):
        run_pass(monitor, frame)

    assert landmarker.face_calls == 22


def test_pass_in_flight_blocks_next_tick(source, landmarker, frame):
    entered = threading.Event()
    proceed = threading.Event()
    calls = []

    def slow_detect_face(frame):
        calls.append(frame)
        entered.set()
        proceed.wait(5)
        return [SCENARIO_FACE]

    landmarker.detect_face = slow_detect_face
    monitor = make_monitor(source, landmarker)

    assert monitor.sampler.tick()
    worker = threading.Thread(target=monitor.on_frame, args=(frame,))
    worker.start()
    assert entered.wait(5)

    assert not monitor.sampler.tick()
    # A frame delivered meanwhile is not processed
    monitor.on_frame(frame)
    assert len(calls) == 1
    assert monitor.snapshot().last_face_seen_at is None

    proceed.set()
    worker.join(5)

    assert not worker.is_alive()
    assert monitor.snapshot().mouth_detected
    assert monitor.sampler.tick()


def test_check_interval_is_clamped(source, landmarker):
    monitor = make_monitor(source, landmarker)

    monitor.check_interval = 0.02

    assert monitor.check_interval == pytest.approx(0.1)


def test_subscribers_see_each_pass(source, landmarker, frame):
    landmarker.faces = [SCENARIO_FACE]
    monitor = make_monitor(source, landmarker)
    states = []
    monitor.state.subscribe(states.append)

    run_pass(monitor, frame)
    landmarker.faces = []
    run_pass(monitor, frame)

    assert [s.mouth_detected for s in states] == [True, False]


def test_start_connects_source(source, landmarker):
    monitor = make_monitor(source, landmarker)
    with mock.patch.object(monitor.sampler, "start") as start_timer:
        monitor.start()

    assert source.on_frame == monitor.on_frame
    start_timer.assert_called_once_with()


def test_cleanup_is_idempotent(source, landmarker):
    monitor = make_monitor(source, landmarker)

    monitor.cleanup()
    monitor.cleanup()

    assert source.stopped == 1
    assert source.released == 1
    assert landmarker.closed == 1


def test_busy_source_keeps_landmarker_open(source, landmarker):
    source.stops_cleanly = False
    monitor = make_monitor(source, landmarker)

    monitor.cleanup()

    assert source.stopped == 1
    assert source.released == 0
    assert landmarker.closed == 0


def test_failed_snapshot_keeps_previous_image(source, landmarker, frame):
    landmarker.faces = [SCENARIO_FACE]
    monitor = make_monitor(source, landmarker)

    landmarker.hands = [INSIDE]
    run_pass(monitor, frame)
    first = monitor.snapshot().last_alert_snapshot
    assert first is not None

    landmarker.hands = [OUTSIDE]
    run_pass(monitor, frame)

    landmarker.hands = [INSIDE]
    empty = Frame(image=np.zeros((0, 0, 3), dtype=np.uint8), timestamp=1.0)
    run_pass(monitor, empty)

    state = monitor.snapshot()
    assert state.hand_in_mouth
    assert state.last_alert_snapshot is first
