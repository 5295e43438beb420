"""Static single-frame gesture predicates.

Fist and finger-count tests use raw image-plane distances from the palm
centre; pinch and open palm use the span-normalized thumb-index distance so
they hold regardless of how far the hand is from the camera.

The stateful pinch latch lives in `gesture_transform.smoothing`.
"""

from __future__ import annotations

from typing import Sequence

from gesture_transform.config import FingerThresholds, PinchConfig
from gesture_transform.landmarks import HandLandmarks

H = HandLandmarks

# Tips that may be designated as "extended" by the finger-count gestures
_COUNTABLE = (H.INDEX_TIP, H.MIDDLE_TIP, H.RING_TIP)


def is_fist(hand: HandLandmarks, thresholds: FingerThresholds) -> bool:
    """Mean fingertip-to-palm distance is small."""
    mean = sum(hand.distance_to_palm(tip) for tip in H.FINGERTIPS) / len(H.FINGERTIPS)
    return mean < thresholds.fist_max_mean


def _only_extended(
    hand: HandLandmarks, extended: Sequence[int], thresholds: FingerThresholds
) -> bool:
    """Exactly `extended` tips pointing up and away; every other finger closed."""
    for tip in extended:
        if hand.distance_to_palm(tip) <= thresholds.extended_min:
            return False
        if not hand.points_up(tip):
            return False

    for tip in H.FINGERTIPS:
        if tip in extended:
            continue
        if hand.distance_to_palm(tip) >= thresholds.closed_max:
            return False
    return True


def is_one_finger(hand: HandLandmarks, thresholds: FingerThresholds) -> bool:
    return _only_extended(hand, _COUNTABLE[:1], thresholds)


def is_two_fingers(hand: HandLandmarks, thresholds: FingerThresholds) -> bool:
    return _only_extended(hand, _COUNTABLE[:2], thresholds)


def is_three_fingers(hand: HandLandmarks, thresholds: FingerThresholds) -> bool:
    return _only_extended(hand, _COUNTABLE, thresholds)


def pinch_distance(hand: HandLandmarks) -> float:
    """Thumb-tip to index-tip distance in hand spans."""
    return hand.normalized_distance(H.THUMB_TIP, H.INDEX_TIP)


def is_open_palm(hand: HandLandmarks, pinching: bool, pinch: PinchConfig) -> bool:
    """Thumb well clear of the pinch band and index/middle spread apart."""
    if pinching:
        return False
    if pinch_distance(hand) <= pinch.end + pinch.open_palm_margin:
        return False
    return hand.distance(H.INDEX_TIP, H.MIDDLE_TIP) > pinch.open_palm_spread
