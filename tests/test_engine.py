"""End-to-end tests for the gesture engine."""

import math

import numpy as np
import pytest

from gesture_transform import synthetic
from gesture_transform.config import EngineConfig, TwoHandConfig
from gesture_transform.engine import GestureEngine
from gesture_transform.metrics import MetricsCollector
from gesture_transform.state import GestureKind, TransitionType


def kinds(events):
    return [(e.type, e.gesture) for e in events]


class TestScenario:
    def test_fist_reset_pinch_sequence(self):
        engine = GestureEngine()

        # Frame 1: fist zooms in by exactly one step
        engine.process([synthetic.make_fist()], timestamp=0.0)
        assert engine.active_gesture is GestureKind.FIST
        assert engine.camera.distance == pytest.approx(3.0 - 0.015)

        # Frame 2: no hands
        engine.process([], timestamp=0.033)
        assert engine.active_gesture is GestureKind.NONE
        assert not any(engine.state.activations().values())

        # Frame 3: pinch engages and seeds the EMA, no scale change yet
        engine.process([synthetic.make_pinch(0.04)], timestamp=0.066)
        assert engine.active_gesture is GestureKind.PINCH
        assert engine.transform.baseline_scale == 1.0

        # Frame 4: sharp close; ema ratio 0.7075 is limited to 0.85
        engine.process([synthetic.make_pinch(0.001)], timestamp=0.1)
        assert engine.active_gesture is GestureKind.PINCH
        assert engine.transform.baseline_scale == pytest.approx(0.85)

        # Frame 5: opening inside the latch; ema ratio ~1.31 is limited to 1.18
        engine.process([synthetic.make_pinch(0.058)], timestamp=0.133)
        assert engine.active_gesture is GestureKind.PINCH
        assert engine.transform.baseline_scale == pytest.approx(0.85 * 1.18)

    def test_opening_pinch_growth_is_limited(self):
        engine = GestureEngine()
        engine.process([synthetic.make_pinch(0.001)], timestamp=0.0)
        engine.process([synthetic.make_pinch(0.05)], timestamp=0.033)
        assert engine.active_gesture is GestureKind.PINCH
        assert engine.transform.baseline_scale == pytest.approx(1.18)


class TestCameraGestures:
    def test_fist_zoom_floor(self):
        engine = GestureEngine()
        engine.accumulator.camera.distance = 0.012
        engine.process([synthetic.make_fist()], timestamp=0.0)
        assert engine.camera.distance == 0.01

    def test_two_fingers_zoom_out(self):
        engine = GestureEngine()
        engine.process([synthetic.make_two_fingers()], timestamp=0.0)
        engine.process([synthetic.make_two_fingers()], timestamp=0.1)
        assert engine.camera.distance == pytest.approx(3.03)

    def test_two_fingers_zoom_ceiling(self):
        engine = GestureEngine()
        engine.accumulator.camera.distance = 14.99
        engine.process([synthetic.make_two_fingers()], timestamp=0.0)
        assert engine.camera.distance == 15.0


class TestMotionGestures:
    def test_one_finger_pans_model_when_locked(self):
        engine = GestureEngine()
        engine.process([synthetic.make_one_finger()], timestamp=0.0)
        assert engine.transform.position == (0.0, 0.0)
        engine.process([synthetic.make_one_finger(offset=(0.01, 0.02))], timestamp=0.1)
        assert engine.transform.position == pytest.approx((-0.02, 0.04))

    def test_one_finger_pans_viewport_when_unlocked(self):
        engine = GestureEngine(EngineConfig(lock_center=False))
        engine.process([synthetic.make_one_finger()], timestamp=0.0)
        engine.process([synthetic.make_one_finger(offset=(0.01, 0.02))], timestamp=0.1)
        assert engine.transform.position == (0.0, 0.0)
        assert (engine.camera.offset_x, engine.camera.offset_y) == pytest.approx((0.0024, -0.0048))
        assert engine.label == "One finger → Pan viewport"

    def test_three_finger_pan_is_capped(self):
        engine = GestureEngine()
        for i in range(5):
            engine.process([synthetic.make_three_fingers(offset=(-0.3 * i, 0.0))], timestamp=i * 0.1)
            if i == 3:
                assert engine.transform.position_x == pytest.approx(2.7)
        assert math.hypot(*engine.transform.position) == pytest.approx(3.0)

    def test_rotate(self):
        engine = GestureEngine()
        engine.process([synthetic.make_rotate()], timestamp=0.0)
        engine.process([synthetic.make_rotate(offset=(0.1, 0.0))], timestamp=0.1)
        assert engine.active_gesture is GestureKind.ROTATE
        assert engine.transform.rotation_y == pytest.approx(-0.1 * math.pi * 1.8)
        assert engine.transform.rotation_x == pytest.approx(0.0)

    def test_open_palm_places_model(self):
        engine = GestureEngine()
        engine.process([synthetic.make_open_palm()], timestamp=0.0)
        assert engine.active_gesture is GestureKind.OPEN_PALM
        assert engine.transform.position == pytest.approx((-0.24, 0.396))

    def test_motion_history_does_not_survive_reentry(self):
        engine = GestureEngine()
        engine.process([synthetic.make_rotate()], timestamp=0.0)
        engine.process([synthetic.make_fist()], timestamp=0.1)
        engine.process([synthetic.make_rotate(offset=(0.2, 0.0))], timestamp=0.2)
        assert engine.transform.rotation_y == 0.0

    def test_tick_decays_position(self):
        engine = GestureEngine()
        engine.process([synthetic.make_open_palm()], timestamp=0.0)
        engine.tick()
        assert engine.transform.position == pytest.approx((-0.18, 0.297))


class TestHysteresis:
    def test_pinch_does_not_flicker_once_engaged(self):
        engine = GestureEngine()
        events = engine.process([synthetic.make_pinch(0.04)], timestamp=0.0)
        assert kinds(events) == [(TransitionType.ENTERED, GestureKind.PINCH)]
        for i, norm in enumerate([0.050, 0.055] * 5, start=1):
            events = engine.process([synthetic.make_pinch(norm)], timestamp=i * 0.03)
            assert kinds(events) == [(TransitionType.CONTINUES, GestureKind.PINCH)]

    def test_pinch_never_engages_inside_band(self):
        engine = GestureEngine()
        for i, norm in enumerate([0.050, 0.055] * 5):
            engine.process([synthetic.make_pinch(norm)], timestamp=i * 0.03)
            assert engine.active_gesture is not GestureKind.PINCH

    @pytest.mark.parametrize("make", [
        synthetic.make_fist,
        synthetic.make_one_finger,
        synthetic.make_two_fingers,
        synthetic.make_three_fingers,
        synthetic.make_open_palm,
        synthetic.make_rotate,
    ])
    def test_single_active_gesture(self, make):
        engine = GestureEngine()
        engine.process([make()], timestamp=0.0)
        assert sum(engine.state.activations().values()) == 1


class TestReset:
    def test_zero_hands_resets_and_reenters(self):
        engine = GestureEngine()
        engine.process([synthetic.make_fist()], timestamp=0.0)
        events = engine.process([], timestamp=0.1)
        assert kinds(events) == [(TransitionType.EXITED, GestureKind.FIST)]
        assert engine.state.current is None
        assert engine.state.last_active == {}

        events = engine.process([synthetic.make_fist()], timestamp=0.2)
        assert kinds(events) == [(TransitionType.ENTERED, GestureKind.FIST)]

    def test_zero_hands_clears_pinch_latch(self):
        engine = GestureEngine()
        engine.process([synthetic.make_pinch(0.04)], timestamp=0.0)
        engine.process([], timestamp=0.1)
        engine.process([synthetic.make_pinch(0.05)], timestamp=0.2)
        assert engine.active_gesture is GestureKind.ROTATE

    def test_reset_keeps_transform(self):
        engine = GestureEngine()
        engine.process([synthetic.make_open_palm()], timestamp=0.0)
        engine.process([], timestamp=0.1)
        assert engine.transform.position == pytest.approx((-0.24, 0.396))

    def test_engine_reset_restores_identity(self):
        engine = GestureEngine()
        engine.process([synthetic.make_open_palm()], timestamp=0.0)
        engine.reset()
        assert engine.active_gesture is GestureKind.NONE
        assert engine.transform.position == (0.0, 0.0)


class TestInputHandling:
    def test_wrong_shape_raises(self):
        with pytest.raises(ValueError):
            GestureEngine().process([np.zeros((20, 3))])

    def test_accepts_lists_and_2d_points(self):
        engine = GestureEngine()
        engine.process([synthetic.make_fist()[:, :2].tolist()], timestamp=0.0)
        assert engine.active_gesture is GestureKind.FIST

    def test_nan_hand_is_treated_as_absent(self):
        metrics = MetricsCollector()
        engine = GestureEngine(metrics=metrics)
        engine.process([synthetic.make_fist()], timestamp=0.0)
        bad = synthetic.make_fist()
        bad[8, 1] = np.nan
        events = engine.process([bad], timestamp=0.1)
        assert kinds(events) == [(TransitionType.EXITED, GestureKind.FIST)]
        assert engine.camera.distance == pytest.approx(2.985)
        snap = metrics.snapshot()
        assert snap["dropped_hands"] == 1
        assert snap["resets"] == 1

    def test_nan_hand_dropped_next_to_good_one(self):
        engine = GestureEngine()
        bad = synthetic.make_fist()
        bad[0, 0] = np.inf
        engine.process([bad, synthetic.make_open_palm()], timestamp=0.0)
        assert engine.active_gesture is GestureKind.OPEN_PALM

    def test_default_timestamp(self):
        events = GestureEngine().process([synthetic.make_fist()])
        assert events[0].timestamp > 0


class TestTwoHand:
    def test_two_hand_mode(self):
        engine = GestureEngine(EngineConfig(two_hand=TwoHandConfig(enabled=True)))
        hands = [
            synthetic.make_one_finger(offset=(-0.2, 0.0)),
            synthetic.make_one_finger(offset=(0.2, 0.0)),
        ]
        events = engine.process(hands, timestamp=0.0)
        assert kinds(events) == [(TransitionType.ENTERED, GestureKind.TWO_HAND)]
        assert engine.transform.gesture_scale == pytest.approx(2.6)
        assert engine.transform.position == pytest.approx((-0.22, 0.396))
        assert engine.label == "Two hands → Scale + Translate"

    def test_two_hands_ignored_when_disabled(self):
        engine = GestureEngine()
        engine.process([synthetic.make_fist()], timestamp=0.0)
        before = engine.transform.snapshot()
        distance = engine.camera.distance
        events = engine.process(
            [synthetic.make_open_palm(), synthetic.make_open_palm(offset=(0.3, 0.0))],
            timestamp=0.1,
        )
        assert events == []
        assert engine.active_gesture is GestureKind.FIST
        assert engine.transform == before
        assert engine.camera.distance == distance

    def test_engines_sharing_a_config_toggle_independently(self):
        cfg = EngineConfig()
        a, b = GestureEngine(cfg), GestureEngine(cfg)
        a.lock_center = False
        a.two_hand_enabled = True
        assert b.lock_center is True
        assert b.two_hand_enabled is False
        assert cfg.lock_center is True
        assert not cfg.two_hand.enabled

    def test_runtime_toggle(self):
        engine = GestureEngine()
        engine.two_hand_enabled = True
        hands = [synthetic.make_one_finger(offset=(-0.2, 0.0)), synthetic.make_one_finger(offset=(0.2, 0.0))]
        engine.process(hands, timestamp=0.0)
        assert engine.active_gesture is GestureKind.TWO_HAND

    def test_back_to_one_hand_exits_two_hand(self):
        engine = GestureEngine(EngineConfig(two_hand=TwoHandConfig(enabled=True)))
        hands = [synthetic.make_one_finger(offset=(-0.2, 0.0)), synthetic.make_one_finger(offset=(0.2, 0.0))]
        engine.process(hands, timestamp=0.0)
        events = engine.process([synthetic.make_fist()], timestamp=0.1)
        assert kinds(events) == [
            (TransitionType.EXITED, GestureKind.TWO_HAND),
            (TransitionType.ENTERED, GestureKind.FIST),
        ]


class TestSuppression:
    def test_suppressed_frames_preserve_state(self):
        metrics = MetricsCollector()
        engine = GestureEngine(metrics=metrics)
        engine.process([synthetic.make_fist()], timestamp=0.0)
        engine.suppress()
        assert engine.process([], timestamp=0.1) == []
        assert engine.active_gesture is GestureKind.FIST
        engine.resume()
        events = engine.process([synthetic.make_fist()], timestamp=0.2)
        assert kinds(events) == [(TransitionType.CONTINUES, GestureKind.FIST)]
        assert metrics.snapshot()["suppressed"] == 1


class TestCallbacksAndMetrics:
    def test_callbacks_receive_every_event(self):
        engine = GestureEngine()
        seen = []
        engine.on_transition(seen.append)
        engine.process([synthetic.make_fist()], timestamp=0.0)
        engine.process([synthetic.make_fist()], timestamp=0.1)
        engine.process([], timestamp=0.2)
        assert [e.type for e in seen] == [
            TransitionType.ENTERED,
            TransitionType.CONTINUES,
            TransitionType.EXITED,
        ]

    def test_entries_counted(self):
        metrics = MetricsCollector()
        engine = GestureEngine(metrics=metrics)
        for i, make in enumerate([synthetic.make_fist, synthetic.make_fist, synthetic.make_open_palm]):
            engine.process([make()], timestamp=i * 0.1)
        assert metrics.gesture_entries == {"fist": 1, "open_palm": 1}
        assert metrics.frames_total == 3
