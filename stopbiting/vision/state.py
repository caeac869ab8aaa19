import dataclasses
import logging
import threading
from typing import Callable, List, Tuple

import numpy as np

from .frame_data import DetectionState, PassResult
from .geometry import hand_in_mouth

logger = logging.getLogger(__name__)

Listener = Callable[[DetectionState], None]


class DetectionStateStore:
    """
    Owner of the published DetectionState.

    One pipeline pass writes at a time; readers get a whole immutable
    snapshot through `snapshot()` or a subscription, never a half-updated one.
    Listeners receive states in the order they were stored, whichever
    thread wrote them.
    """

    def __init__(self):
        self._lock = threading.Lock()
        # Held across swap and delivery; reentrant so a listener may write
        self._publish_lock = threading.RLock()
        self._state = DetectionState()
        self._listeners: List[Listener] = []

    def snapshot(self) -> DetectionState:
        with self._lock:
            return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def commit(self, result: PassResult) -> bool:
        """Fold one pass into the state. Returns True on a false -> true alert edge."""
        alert = result.mouth_detected and hand_in_mouth(result.mouth_region, result.fingertip_sets)
        changes = dict(
            mouth_detected=result.mouth_detected,
            mouth_region=result.mouth_region,
            fingertip_sets=result.fingertip_sets,
            hand_in_mouth=alert,
        )
        if result.face_seen_at is not None:
            changes["last_face_seen_at"] = result.face_seen_at

        with self._publish_lock:
            previous, state = self._swap(changes)

            edge = alert and not previous.hand_in_mouth
            if edge:
                logger.info("Finger detected near mouth")
            elif previous.hand_in_mouth and not alert:
                logger.info("Hand left mouth region")

            self._notify(state)
        return edge

    def set_alert_snapshot(self, image: np.ndarray):
        with self._publish_lock:
            _, state = self._swap(dict(last_alert_snapshot=image))
            self._notify(state)

    def _swap(self, changes) -> Tuple[DetectionState, DetectionState]:
        with self._lock:
            previous = self._state
            self._state = dataclasses.replace(previous, **changes)
            return previous, self._state

    def _notify(self, state: DetectionState):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("State listener %r failed", listener)
