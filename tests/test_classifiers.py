"""Tests for the static gesture predicates."""

import pytest

from gesture_transform import classifiers, synthetic
from gesture_transform.config import FingerThresholds, PinchConfig
from gesture_transform.landmarks import HandLandmarks

T = FingerThresholds()
P = PinchConfig()


def wrap(lm):
    return HandLandmarks(lm)


POSES = {
    "fist": synthetic.make_fist,
    "one": synthetic.make_one_finger,
    "two": synthetic.make_two_fingers,
    "three": synthetic.make_three_fingers,
    "open": synthetic.make_open_palm,
    "rotate": synthetic.make_rotate,
}


class TestFist:
    def test_fist(self):
        assert classifiers.is_fist(wrap(synthetic.make_fist()), T)

    @pytest.mark.parametrize("pose", ["one", "two", "three", "open"])
    def test_not_fist(self, pose):
        assert not classifiers.is_fist(wrap(POSES[pose]()), T)

    def test_uses_raw_image_distance(self):
        # Same shape scaled down (hand far from camera) becomes a fist
        lm = synthetic.make_open_palm()
        center = lm[[0, 5, 9, 13, 17], :2].mean(axis=0)
        lm[:, :2] = center + (lm[:, :2] - center) * 0.2
        assert classifiers.is_fist(wrap(lm), T)


class TestFingerCounts:
    def test_one_finger(self):
        hand = wrap(synthetic.make_one_finger())
        assert classifiers.is_one_finger(hand, T)
        assert not classifiers.is_two_fingers(hand, T)
        assert not classifiers.is_three_fingers(hand, T)

    def test_two_fingers(self):
        hand = wrap(synthetic.make_two_fingers())
        assert classifiers.is_two_fingers(hand, T)
        assert not classifiers.is_one_finger(hand, T)
        assert not classifiers.is_three_fingers(hand, T)

    def test_three_fingers(self):
        hand = wrap(synthetic.make_three_fingers())
        assert classifiers.is_three_fingers(hand, T)
        assert not classifiers.is_one_finger(hand, T)
        assert not classifiers.is_two_fingers(hand, T)

    def test_pointing_down_is_rejected(self):
        lm = synthetic.make_one_finger()
        lm[8] = [0.40, 0.75, 0.0]  # far from palm but below the knuckle
        assert not classifiers.is_one_finger(wrap(lm), T)

    def test_thumb_out_breaks_one_finger(self):
        lm = synthetic.make_hand(["index", "thumb"])
        assert not classifiers.is_one_finger(wrap(lm), T)

    def test_open_palm_matches_no_count(self):
        hand = wrap(synthetic.make_open_palm())
        assert not classifiers.is_one_finger(hand, T)
        assert not classifiers.is_two_fingers(hand, T)
        assert not classifiers.is_three_fingers(hand, T)

    def test_relaxed_closed_threshold_overlaps(self):
        relaxed = FingerThresholds(closed_max=0.3)
        hand = wrap(synthetic.make_two_fingers())
        assert classifiers.is_one_finger(hand, relaxed)
        assert classifiers.is_two_fingers(hand, relaxed)


class TestPinchAndPalm:
    def test_pinch_distance_is_span_normalized(self):
        assert classifiers.pinch_distance(wrap(synthetic.make_pinch(0.04))) == pytest.approx(0.04)

    def test_open_palm(self):
        assert classifiers.is_open_palm(wrap(synthetic.make_open_palm()), False, P)

    def test_open_palm_blocked_while_pinching(self):
        assert not classifiers.is_open_palm(wrap(synthetic.make_open_palm()), True, P)

    def test_open_palm_needs_margin_above_release(self):
        # Just above the release threshold but inside the margin
        assert not classifiers.is_open_palm(wrap(synthetic.make_pinch(0.065)), False, P)

    def test_open_palm_needs_finger_spread(self):
        assert not classifiers.is_open_palm(wrap(synthetic.make_rotate()), False, P)
