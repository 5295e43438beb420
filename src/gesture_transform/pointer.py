"""Mouse / trackpad analog of the hand gestures.

Drag modes are picked on press the way most 3D viewers do it:

- left button: rotate
- left + ctrl/meta: scale
- left + shift/alt, middle or right button: translate

The wheel zooms the camera. Pointer input writes through the same
`TransformAccumulator` as the hand gestures, so clamps and lock-center
decay apply identically.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from gesture_transform.config import EngineConfig
from gesture_transform.smoothing import clamp
from gesture_transform.transform import TransformAccumulator


class PointerMode(Enum):
    ROTATE = "rotate"
    TRANSLATE = "translate"
    SCALE = "scale"


class PointerButton(Enum):
    LEFT = 0
    MIDDLE = 1
    RIGHT = 2


class PointerController:
    """Maps pointer drags and wheel events to transform updates.

    Args:
        accumulator: Target transform owner (usually `engine.accumulator`).
        config: Shared engine configuration.
        viewport: Render surface size in pixels, for screen-to-world moves.
    """

    def __init__(
        self,
        accumulator: TransformAccumulator,
        config: Optional[EngineConfig] = None,
        viewport: tuple[int, int] = (1280, 720),
    ):
        self.accumulator = accumulator
        self.config = config or accumulator.config
        self.viewport = viewport
        self.mode = PointerMode.ROTATE
        self.label = ""
        self._down = False
        self._last: tuple[float, float] = (0.0, 0.0)

    @property
    def is_down(self) -> bool:
        return self._down

    def press(
        self,
        button: PointerButton | int,
        x: float,
        y: float,
        ctrl: bool = False,
        shift: bool = False,
        alt: bool = False,
        meta: bool = False,
    ) -> PointerMode:
        button = PointerButton(button)
        if button is PointerButton.LEFT:
            if ctrl or meta:
                self.mode = PointerMode.SCALE
            elif shift or alt:
                self.mode = PointerMode.TRANSLATE
            else:
                self.mode = PointerMode.ROTATE
        else:
            self.mode = PointerMode.TRANSLATE

        self._down = True
        self._last = (x, y)
        return self.mode

    def move(self, x: float, y: float):
        """Apply the drag since the last event (pixels, y down)."""
        if not self._down:
            return
        dx, dy = x - self._last[0], y - self._last[1]
        self._last = (x, y)
        p = self.config.pointer

        if self.mode is PointerMode.ROTATE:
            self.accumulator.rotate(dx, dy, p.rotate_gain)
            self.label = "Rotate (Mouse)"
        elif self.mode is PointerMode.SCALE:
            self.accumulator.scale_baseline(math.exp(-dy * p.scale_rate))
            self.label = "Scale (Mouse)"
        elif self.config.lock_center:
            wx, wy = self.screen_to_world(dx, dy)
            self.accumulator.translate(wx, -wy)
            self.label = "Pan Model (Mouse)"
        else:
            self.accumulator.pan_camera(-dx * p.viewport_pan_rate, dy * p.viewport_pan_rate)
            self.label = "Pan Viewport (Mouse)"

    def release(self):
        self._down = False

    def wheel(self, delta_y: float) -> float:
        """Zoom the camera; positive delta moves away. Returns new distance."""
        c = self.config.camera
        factor = 1 + clamp(delta_y * c.wheel_sensitivity, -c.wheel_clamp, c.wheel_clamp)
        self.label = "Zoom Out (Wheel)" if delta_y > 0 else "Zoom In (Wheel)"
        return self.accumulator.zoom_camera_by(factor)

    def screen_to_world(self, dx: float, dy: float) -> tuple[float, float]:
        """Pixel delta to world units at the object's depth."""
        height = self.viewport[1] or 1
        fov = math.radians(self.config.pointer.fov_degrees)
        per_pixel = 2 * math.tan(fov / 2) * self.accumulator.camera.distance / height
        return dx * per_pixel, dy * per_pixel
