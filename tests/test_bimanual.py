"""Tests for the two-hand scale + translate mapping."""

import pytest

from gesture_transform import synthetic
from gesture_transform.bimanual import TwoHandArbitrator
from gesture_transform.config import TwoHandConfig
from gesture_transform.landmarks import HandLandmarks
from gesture_transform.transform import TransformAccumulator


def _pair(half_gap: float):
    left = HandLandmarks(synthetic.make_one_finger(offset=(-half_gap, 0.0)))
    right = HandLandmarks(synthetic.make_one_finger(offset=(half_gap, 0.0)))
    return left, right


class TestTwoHandArbitrator:
    def test_applies(self):
        assert TwoHandArbitrator.applies(2, True)
        assert TwoHandArbitrator.applies(3, True)
        assert not TwoHandArbitrator.applies(1, True)
        assert not TwoHandArbitrator.applies(2, False)

    def test_measure(self):
        reading = TwoHandArbitrator().measure(*_pair(0.2))
        assert reading.distance == pytest.approx(0.4)
        assert reading.midpoint == pytest.approx((0.4, 0.28))
        assert reading.scale == pytest.approx(2.6)
        assert reading.position == pytest.approx((-0.22, 0.396))

    def test_scale_clamped(self):
        far = TwoHandArbitrator().measure(*_pair(1.0))
        assert far.scale == 8.0
        near = TwoHandArbitrator(TwoHandConfig(scale_offset=-1.0)).measure(*_pair(0.0))
        assert near.scale == 0.1

    def test_apply_writes_gesture_scale_not_baseline(self):
        acc = TransformAccumulator()
        acc.scale_baseline(1.5)
        TwoHandArbitrator().apply(*_pair(0.2), acc)
        assert acc.target.gesture_scale == pytest.approx(2.6)
        assert acc.target.baseline_scale == 1.5
        assert acc.target.position == pytest.approx((-0.22, 0.396))

    def test_apply_is_not_cumulative(self):
        acc = TransformAccumulator()
        arbitrator = TwoHandArbitrator()
        arbitrator.apply(*_pair(0.2), acc)
        arbitrator.apply(*_pair(0.2), acc)
        assert acc.target.gesture_scale == pytest.approx(2.6)
