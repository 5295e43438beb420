"""Gesture interpretation engine: landmarks in, manipulation intent out.

Per detector callback:

    hands → normalizer → classifiers → arbiter → gesture handler → accumulator

The two-hand path short-circuits single-hand arbitration when two hands are
visible and the mode is on. Consumers pull `engine.transform`,
`engine.camera` and `engine.label` once per render tick and call
`engine.tick()` from the same timer.

The engine is not reentrant: callers must serialise `process()` calls.
"""

from __future__ import annotations

import copy
import logging
import time
from typing import Callable, Optional, Sequence

import numpy as np

from gesture_transform.arbiter import GestureArbiter, Predicate
from gesture_transform.bimanual import TwoHandArbitrator
from gesture_transform.classifiers import pinch_distance
from gesture_transform.config import EngineConfig
from gesture_transform.landmarks import HandLandmarks, as_hand, is_finite
from gesture_transform.metrics import MetricsCollector
from gesture_transform.smoothing import PinchHysteresis, pinch_scale_ratio
from gesture_transform.state import (
    ActiveGesture,
    GestureKind,
    GestureState,
    TransitionEvent,
    TransitionType,
)
from gesture_transform.transform import CameraTarget, TargetTransform, TransformAccumulator

logger = logging.getLogger("gesture_transform.engine")

H = HandLandmarks

Handler = Callable[[HandLandmarks, ActiveGesture], None]


class GestureEngine:
    """Turns a stream of hand-landmark frames into transform updates.

    Args:
        config: Thresholds and toggles, copied so runtime toggles stay
            local to this engine. Defaults to `EngineConfig()`.
        metrics: Optional collector updated on every frame.
        priority: Optional override of the primary gesture priority list.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        metrics: Optional[MetricsCollector] = None,
        priority: Optional[Sequence[tuple[Predicate, GestureKind]]] = None,
    ):
        self.config = copy.deepcopy(config or EngineConfig()).validate()
        self.metrics = metrics

        self.state = GestureState(pinch=PinchHysteresis.from_config(self.config.pinch))
        self.arbiter = GestureArbiter(self.config, self.state, priority)
        self.accumulator = TransformAccumulator(self.config)
        self.two_hand = TwoHandArbitrator(self.config.two_hand)

        self._callbacks: list[Callable[[TransitionEvent], None]] = []
        self._suppressed = False
        self._handlers: dict[GestureKind, Handler] = {
            GestureKind.FIST: self._zoom_in,
            GestureKind.TWO_FINGER: self._zoom_out,
            GestureKind.ONE_FINGER: self._pan_one_finger,
            GestureKind.THREE_FINGER: self._pan_three_fingers,
            GestureKind.PINCH: self._scale_pinch,
            GestureKind.OPEN_PALM: self._translate_open_palm,
            GestureKind.ROTATE: self._rotate,
        }

    def on_transition(self, callback: Callable[[TransitionEvent], None]):
        """Register a callback for entered/continues/exited events."""
        self._callbacks.append(callback)

    def process(
        self,
        hands: Sequence[Sequence | np.ndarray],
        timestamp: Optional[float] = None,
    ) -> list[TransitionEvent]:
        """Process one detector frame.

        Args:
            hands: Zero or more hands, each 21 (x, y, z) landmarks in
                image-normalized coordinates (y down).
            timestamp: Frame time in seconds; monotonic clock if omitted.

        Returns:
            Transition events for this frame (empty while suppressed).

        Raises:
            ValueError: if a hand does not have 21 landmarks.
        """
        if self._suppressed:
            if self.metrics:
                self.metrics.record_suppressed()
            return []

        t_start = time.perf_counter()
        now = timestamp if timestamp is not None else time.monotonic()

        arrays = [as_hand(h) for h in hands]
        finite = [h for h in arrays if is_finite(h)]
        if len(finite) < len(arrays):
            dropped = len(arrays) - len(finite)
            logger.debug("Dropped %d hand(s) with non-finite landmarks", dropped)
            if self.metrics:
                self.metrics.record_dropped(dropped)

        eps = self.config.span_epsilon
        detected = [HandLandmarks(h, span_epsilon=eps) for h in finite]

        if not detected:
            events = self.arbiter.reset(now)
            if events and self.metrics:
                self.metrics.record_reset()
        elif len(detected) >= 2:
            if self.two_hand.applies(len(detected), self.config.two_hand.enabled):
                events = self.arbiter.enter(GestureKind.TWO_HAND, now)
                self.two_hand.apply(detected[0], detected[1], self.accumulator)
            else:
                logger.debug("%d hands with two-hand mode off; frame ignored", len(detected))
                events = []
        else:
            active, events = self.arbiter.resolve(detected[0], now)
            self._handlers[active.kind](detected[0], active)

        for event in events:
            if event.type is TransitionType.ENTERED and self.metrics:
                self.metrics.record_entry(event.gesture.value)
            for cb in self._callbacks:
                cb(event)

        if self.metrics:
            self.metrics.record_frame(time.perf_counter() - t_start, len(detected))

        return events

    # --- gesture handlers ---

    def _zoom_in(self, hand: HandLandmarks, active: ActiveGesture):
        self.accumulator.zoom_camera(-self.config.camera.fist_zoom_speed)

    def _zoom_out(self, hand: HandLandmarks, active: ActiveGesture):
        self.accumulator.zoom_camera(self.config.camera.two_finger_zoom_speed)

    def _pan_one_finger(self, hand: HandLandmarks, active: ActiveGesture):
        delta = active.track(hand.centroid([H.INDEX_TIP]))
        if delta is None:
            return
        pan = self.config.pan
        dx = delta[0] * pan.one_finger_sensitivity
        dy = delta[1] * pan.one_finger_sensitivity

        if self.config.lock_center:
            self.accumulator.translate(
                -dx * pan.model_gain, dy * pan.model_gain,
                max_distance=pan.max_pan_distance,
            )
        else:
            # Camera is not smoothed downstream, so ease it here
            self.accumulator.pan_camera(
                dx * pan.viewport_gain, -dy * pan.viewport_gain,
                smoothing=pan.viewport_smoothing,
            )

    def _pan_three_fingers(self, hand: HandLandmarks, active: ActiveGesture):
        delta = active.track(hand.centroid([H.INDEX_TIP, H.MIDDLE_TIP, H.RING_TIP]))
        if delta is None:
            return
        pan = self.config.pan
        dx = delta[0] * pan.three_finger_sensitivity
        dy = delta[1] * pan.three_finger_sensitivity
        self.accumulator.translate(
            -dx * pan.model_gain, dy * pan.model_gain,
            max_distance=pan.max_pan_distance,
        )

    def _scale_pinch(self, hand: HandLandmarks, active: ActiveGesture):
        cfg = self.config.pinch
        current, previous = active.smooth(pinch_distance(hand), cfg.ema_alpha)
        ratio = pinch_scale_ratio(current, previous, cfg)
        if ratio is not None:
            self.accumulator.scale_baseline(ratio)

    def _translate_open_palm(self, hand: HandLandmarks, active: ActiveGesture):
        pan = self.config.pan
        ix, iy = hand.centroid([H.INDEX_TIP])
        self.accumulator.place(
            (ix - 0.5) * 2 * pan.open_palm_range_x,
            (0.5 - iy) * 2 * pan.open_palm_range_y,
        )

    def _rotate(self, hand: HandLandmarks, active: ActiveGesture):
        delta = active.track(hand.centroid([H.INDEX_TIP]))
        if delta is not None:
            self.accumulator.rotate(delta[0], delta[1], self.config.rotate.angular_gain)

    # --- render-tick side ---

    def tick(self):
        """Per-render-tick work that runs regardless of gestures."""
        self.accumulator.tick()

    @property
    def transform(self) -> TargetTransform:
        return self.accumulator.target

    @property
    def camera(self) -> CameraTarget:
        return self.accumulator.camera

    @property
    def active_gesture(self) -> GestureKind:
        return self.state.kind

    @property
    def label(self) -> str:
        return self.arbiter.label

    # --- runtime toggles ---

    @property
    def lock_center(self) -> bool:
        return self.config.lock_center

    @lock_center.setter
    def lock_center(self, value: bool):
        self.config.lock_center = value

    @property
    def two_hand_enabled(self) -> bool:
        return self.config.two_hand.enabled

    @two_hand_enabled.setter
    def two_hand_enabled(self, value: bool):
        self.config.two_hand.enabled = value

    @property
    def suppressed(self) -> bool:
        return self._suppressed

    def suppress(self):
        """Skip frames (AR session, replay) without touching gesture state."""
        self._suppressed = True

    def resume(self):
        self._suppressed = False

    def reset(self):
        """Clear gesture state and return the target transform to identity."""
        self.state.reset()
        self.accumulator.reset()
