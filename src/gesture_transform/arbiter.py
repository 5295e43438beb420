"""Gesture arbitration: turn classifier matches into exactly one active gesture.

Two exclusivity groups are evaluated in fixed priority order, first match
wins:

    Fist > TwoFinger > OneFinger > ThreeFinger
    Pinch > OpenPalm > Rotate (fallback)

The second group is only consulted when nothing in the first matched, so a
hand in mid-transition collapses toward the stricter shape instead of
flickering into the rotate fallback.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Optional, Sequence

from gesture_transform import classifiers
from gesture_transform.config import EngineConfig
from gesture_transform.landmarks import HandLandmarks
from gesture_transform.smoothing import PinchHysteresis
from gesture_transform.state import (
    ActiveGesture,
    GestureKind,
    GestureState,
    TransitionEvent,
    TransitionType,
    gesture_label,
)

logger = logging.getLogger("gesture_transform.arbiter")

Predicate = Callable[[HandLandmarks], bool]


def default_priority(config: EngineConfig) -> list[tuple[Predicate, GestureKind]]:
    """Primary group as an ordered (predicate, kind) list."""
    f = config.fingers
    return [
        (partial(classifiers.is_fist, thresholds=f), GestureKind.FIST),
        (partial(classifiers.is_two_fingers, thresholds=f), GestureKind.TWO_FINGER),
        (partial(classifiers.is_one_finger, thresholds=f), GestureKind.ONE_FINGER),
        (partial(classifiers.is_three_fingers, thresholds=f), GestureKind.THREE_FINGER),
    ]


class GestureArbiter:
    """Holds gesture state across frames and resolves one winner per frame.

    Args:
        config: Engine configuration (thresholds, lock-center flag for labels).
        state: State object to mutate; a fresh one is created if omitted.
        priority: Optional override of the primary (predicate, kind) order.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        state: Optional[GestureState] = None,
        priority: Optional[Sequence[tuple[Predicate, GestureKind]]] = None,
    ):
        self.config = config or EngineConfig()
        self.state = state or GestureState(pinch=PinchHysteresis.from_config(self.config.pinch))
        self.priority = list(priority) if priority is not None else default_priority(self.config)

    def classify(self, hand: HandLandmarks) -> GestureKind:
        """Pick the winning gesture kind for one hand.

        Updates the pinch latch when the secondary group is reached, so this
        is not side-effect free.
        """
        for predicate, kind in self.priority:
            if predicate(hand):
                return kind

        pinching = self.state.pinch.update(classifiers.pinch_distance(hand))
        secondary: list[tuple[Predicate, GestureKind]] = [
            (lambda _: pinching, GestureKind.PINCH),
            (partial(classifiers.is_open_palm, pinching=pinching, pinch=self.config.pinch),
             GestureKind.OPEN_PALM),
        ]
        for predicate, kind in secondary:
            if predicate(hand):
                return kind
        return GestureKind.ROTATE

    def resolve(
        self, hand: HandLandmarks, now: float
    ) -> tuple[ActiveGesture, list[TransitionEvent]]:
        """Classify a single-hand frame and advance the state machine."""
        kind = self.classify(hand)
        events = self.enter(kind, now)
        return self.state.current, events

    def enter(self, kind: GestureKind, now: float) -> list[TransitionEvent]:
        """Make `kind` the active gesture and report the frame-edge change."""
        current = self.state.current
        events: list[TransitionEvent] = []

        if current is not None and current.kind is kind:
            self.state.last_active[kind] = now
            events.append(self._event(TransitionType.CONTINUES, kind, now))
            return events

        if current is not None:
            events.append(self._event(TransitionType.EXITED, current.kind, now))

        # New payload: continuation from an earlier activation never leaks in
        self.state.current = ActiveGesture(kind=kind, since=now)
        self.state.last_active[kind] = now
        events.append(self._event(TransitionType.ENTERED, kind, now))
        logger.debug("gesture %s entered at %.3f", kind.value, now)
        return events

    def reset(self, now: float) -> list[TransitionEvent]:
        """Zero hands: back to None, all continuation state cleared."""
        events = []
        if self.state.current is not None:
            events.append(self._event(TransitionType.EXITED, self.state.current.kind, now))
            logger.debug("no hands, resetting from %s", self.state.current.kind.value)
        self.state.reset()
        return events

    @property
    def label(self) -> str:
        return gesture_label(self.state.kind, self.config.lock_center)

    def _event(self, type_: TransitionType, kind: GestureKind, now: float) -> TransitionEvent:
        return TransitionEvent(
            type=type_,
            gesture=kind,
            label=gesture_label(kind, self.config.lock_center),
            timestamp=now,
        )
