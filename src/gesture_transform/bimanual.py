"""Two-hand scale + translate.

When two or more hands are in view and the mode is enabled, the single-hand
gestures are skipped for that frame. The index fingertips of the first two
hands drive the transform directly:

    arbitrator = TwoHandArbitrator(config)
    if arbitrator.applies(len(hands), enabled=True):
        reading = arbitrator.apply(hands[0], hands[1], accumulator)
        print(f"scale={reading.scale:.2f} at {reading.position}")

Scale is an absolute function of fingertip distance. It replaces the gesture
scale instead of multiplying the pinch-driven baseline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gesture_transform.config import TwoHandConfig
from gesture_transform.landmarks import HandLandmarks
from gesture_transform.smoothing import clamp
from gesture_transform.transform import TransformAccumulator


@dataclass
class TwoHandReading:
    """Measurements and mapped targets for one two-hand frame."""
    distance: float
    midpoint: tuple[float, float]
    scale: float
    position: tuple[float, float]


class TwoHandArbitrator:
    """Maps inter-hand index-fingertip distance and midpoint to a transform.

    No smoothing or hysteresis is applied here; the renderer's own
    interpolation toward the target smooths the motion.
    """

    def __init__(self, config: Optional[TwoHandConfig] = None):
        self.config = config or TwoHandConfig()

    @staticmethod
    def applies(hand_count: int, enabled: bool) -> bool:
        return enabled and hand_count >= 2

    def measure(self, first: HandLandmarks, second: HandLandmarks) -> TwoHandReading:
        c = self.config
        a = first.point(HandLandmarks.INDEX_TIP)
        b = second.point(HandLandmarks.INDEX_TIP)

        distance = float(((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2) ** 0.5)
        mx = float(a[0] + b[0]) / 2
        my = float(a[1] + b[1]) / 2

        scale = clamp(c.scale_offset + distance * c.scale_gain, c.scale_min, c.scale_max)
        # Image y grows downward, world y upward
        px = clamp((mx - 0.5) * 2 * c.range_x, -c.range_x, c.range_x)
        py = clamp((0.5 - my) * 2 * c.range_y, -c.range_y, c.range_y)

        return TwoHandReading(
            distance=distance,
            midpoint=(mx, my),
            scale=scale,
            position=(px, py),
        )

    def apply(
        self,
        first: HandLandmarks,
        second: HandLandmarks,
        accumulator: TransformAccumulator,
    ) -> TwoHandReading:
        reading = self.measure(first, second)
        accumulator.set_gesture_scale(reading.scale)
        accumulator.place(*reading.position)
        return reading
