"""Temporal smoothing: pinch hysteresis, EMA and interpolation helpers.

Two filters run side by side. The hysteresis latch stabilises the binary
pinch state; the EMA and lerp helpers stabilise continuous magnitudes.
"""

from __future__ import annotations

from typing import Optional

from gesture_transform.config import PinchConfig


class PinchHysteresis:
    """Pinch latch with separate engage and release thresholds.

    Values between `start` and `end` keep whatever state was last reached.
    """

    def __init__(self, start: float = 0.045, end: float = 0.060):
        if start >= end:
            raise ValueError(f"start ({start}) must be below end ({end})")
        self.start = start
        self.end = end
        self.engaged = False

    @classmethod
    def from_config(cls, cfg: PinchConfig) -> PinchHysteresis:
        return cls(cfg.start, cfg.end)

    def update(self, value: float) -> bool:
        if not self.engaged and value < self.start:
            self.engaged = True
        elif self.engaged and value > self.end:
            self.engaged = False
        return self.engaged

    def reset(self):
        self.engaged = False


def ema(previous: Optional[float], raw: float, alpha: float) -> float:
    """One EMA step; the first sample seeds the filter."""
    if previous is None:
        return raw
    return previous * (1.0 - alpha) + raw * alpha


def clamp(value: float, lo: float, hi: float) -> float:
    return lo if value < lo else hi if value > hi else value


def pinch_scale_ratio(
    current: float, previous: Optional[float], cfg: PinchConfig
) -> Optional[float]:
    """Scale multiplier between two smoothed pinch readings.

    Returns None when there is no usable previous reading or the change is
    inside the deadzone; otherwise the ratio clamped to the per-frame limits.
    """
    if previous is None or previous <= 0:
        return None
    ratio = current / previous
    if abs(ratio - 1.0) <= cfg.min_change_ratio:
        return None
    return clamp(ratio, cfg.ratio_clamp_min, cfg.ratio_clamp_max)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def lerp2(
    a: tuple[float, float], b: tuple[float, float], t: float
) -> tuple[float, float]:
    return lerp(a[0], b[0], t), lerp(a[1], b[1], t)
