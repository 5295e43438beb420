"""Target transform state and the accumulator that mutates it.

The renderer pulls `TargetTransform` and `CameraTarget` once per animation
tick and interpolates toward them itself. Gesture handlers only ever write
through `TransformAccumulator`, which owns every clamp.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Optional

from gesture_transform.config import EngineConfig
from gesture_transform.smoothing import clamp, lerp, lerp2

logger = logging.getLogger("gesture_transform.transform")


@dataclass
class TargetTransform:
    """Where the manipulated object should end up.

    `gesture_scale` is written by the two-hand path (absolute) and replay;
    `baseline_scale` is the user/pinch-driven base. The effective scale is
    their product.
    """
    gesture_scale: float = 1.0
    baseline_scale: float = 1.0
    rotation_x: float = 0.0
    rotation_y: float = 0.0
    position_x: float = 0.0
    position_y: float = 0.0

    @property
    def scale(self) -> float:
        return self.gesture_scale * self.baseline_scale

    @property
    def rotation(self) -> tuple[float, float]:
        return self.rotation_x, self.rotation_y

    @property
    def position(self) -> tuple[float, float]:
        return self.position_x, self.position_y

    def snapshot(self) -> TargetTransform:
        return TargetTransform(**asdict(self))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["scale"] = self.scale
        return data


@dataclass
class CameraTarget:
    """Camera distance from the object and viewport pan offset."""
    distance: float = 3.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


class TransformAccumulator:
    """Applies gesture deltas to the target transform under fixed limits."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.target = TargetTransform()
        self.camera = CameraTarget(distance=self.config.camera.initial_distance)

    # --- scale ---

    def scale_baseline(self, factor: float) -> float:
        """Multiply the baseline scale, pinned to the configured range."""
        if not _finite(factor) or factor <= 0:
            logger.warning("Ignoring invalid scale factor %r", factor)
            return self.target.baseline_scale
        s = self.config.scale
        self.target.baseline_scale = clamp(
            self.target.baseline_scale * factor, s.baseline_min, s.baseline_max
        )
        return self.target.baseline_scale

    def set_baseline_scale(self, value: float) -> float:
        if not _finite(value):
            logger.warning("Ignoring non-finite baseline scale %r", value)
            return self.target.baseline_scale
        s = self.config.scale
        self.target.baseline_scale = clamp(value, s.baseline_min, s.baseline_max)
        return self.target.baseline_scale

    def set_gesture_scale(self, value: float):
        if not _finite(value) or value <= 0:
            logger.warning("Ignoring invalid gesture scale %r", value)
            return
        self.target.gesture_scale = value

    # --- rotation ---

    def rotate(self, dx: float, dy: float, gain: float):
        """Rotate from normalized motion: horizontal spins y, vertical tilts x."""
        if not _finite(dx, dy):
            logger.warning("Ignoring non-finite rotation delta (%r, %r)", dx, dy)
            return
        self.target.rotation_y += -dx * gain
        self.target.rotation_x += -dy * gain

    # --- position ---

    def translate(self, dx: float, dy: float, max_distance: Optional[float] = None):
        """Shift the target position, optionally capping its distance from origin.

        The cap rescales the whole vector so the direction is preserved.
        """
        if not _finite(dx, dy):
            logger.warning("Ignoring non-finite translation (%r, %r)", dx, dy)
            return
        x = self.target.position_x + dx
        y = self.target.position_y + dy
        if max_distance is not None:
            length = math.hypot(x, y)
            if length > max_distance:
                x, y = x * max_distance / length, y * max_distance / length
        self.target.position_x, self.target.position_y = x, y

    def place(self, x: float, y: float):
        """Set the target position directly."""
        if not _finite(x, y):
            logger.warning("Ignoring non-finite position (%r, %r)", x, y)
            return
        self.target.position_x, self.target.position_y = x, y

    # --- camera ---

    def zoom_camera(self, delta: float) -> float:
        """Move the camera by `delta` along its view axis, within limits."""
        c = self.config.camera
        if _finite(delta):
            self.camera.distance = clamp(self.camera.distance + delta, c.min_distance, c.max_distance)
        return self.camera.distance

    def zoom_camera_by(self, factor: float) -> float:
        c = self.config.camera
        if _finite(factor) and factor > 0:
            self.camera.distance = clamp(self.camera.distance * factor, c.min_distance, c.max_distance)
        return self.camera.distance

    def pan_camera(self, dx: float, dy: float, smoothing: float = 1.0):
        """Pan the viewport; `smoothing` < 1 eases toward the new offset."""
        if not _finite(dx, dy):
            logger.warning("Ignoring non-finite camera pan (%r, %r)", dx, dy)
            return
        current = (self.camera.offset_x, self.camera.offset_y)
        goal = (current[0] + dx, current[1] + dy)
        self.camera.offset_x, self.camera.offset_y = lerp2(current, goal, smoothing)

    # --- per tick ---

    def tick(self):
        """Lock-center decay: drift the target back to the origin every tick."""
        if not self.config.lock_center:
            return
        k = self.config.center_decay
        self.target.position_x = lerp(self.target.position_x, 0.0, k)
        self.target.position_y = lerp(self.target.position_y, 0.0, k)

    def load(
        self,
        gesture_scale: float,
        rotation: tuple[float, float],
        position: tuple[float, float],
        baseline_scale: Optional[float] = None,
    ):
        """Overwrite the target wholesale (replay)."""
        self.set_gesture_scale(gesture_scale)
        if baseline_scale is not None:
            self.set_baseline_scale(baseline_scale)
        if _finite(*rotation):
            self.target.rotation_x, self.target.rotation_y = rotation
        self.place(*position)

    def reset(self):
        self.target = TargetTransform()
        self.camera = CameraTarget(distance=self.config.camera.initial_distance)
