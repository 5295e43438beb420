"""Tunable thresholds and feature toggles for the gesture engine.

Every numeric constant used by the classifiers, the smoothing layer and the
transform accumulator lives here so it can be overridden per engine instance
or loaded from a YAML file:

    config = EngineConfig.from_yaml("engine.yml")
    config.two_hand.enabled = True
    engine = GestureEngine(config)
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml


@dataclass
class FingerThresholds:
    """Image-plane distances (not span-normalized) for fist / finger counts."""
    fist_max_mean: float = 0.08
    extended_min: float = 0.15
    closed_max: float = 0.12


@dataclass
class PinchConfig:
    """Span-normalized pinch band, EMA and per-frame ratio limits."""
    start: float = 0.045  # engage when below
    end: float = 0.060    # release when above
    open_palm_margin: float = 0.01
    open_palm_spread: float = 0.09  # image-plane index-middle distance
    ema_alpha: float = 0.3
    min_change_ratio: float = 0.01  # deadzone
    ratio_clamp_min: float = 0.85
    ratio_clamp_max: float = 1.18


@dataclass
class CameraConfig:
    initial_distance: float = 3.0
    min_distance: float = 0.01
    max_distance: float = 15.0
    fist_zoom_speed: float = 0.015
    two_finger_zoom_speed: float = 0.015
    wheel_sensitivity: float = 0.001
    wheel_clamp: float = 0.5


@dataclass
class PanConfig:
    one_finger_sensitivity: float = 0.8
    three_finger_sensitivity: float = 1.2
    model_gain: float = 2.5
    viewport_gain: float = 3.0
    viewport_smoothing: float = 0.1
    max_pan_distance: float = 3.0
    open_palm_range_x: float = 1.2
    open_palm_range_y: float = 0.9


@dataclass
class RotateConfig:
    angular_gain: float = math.pi * 1.8


@dataclass
class ScaleConfig:
    baseline_min: float = 0.05
    baseline_max: float = 10.0


@dataclass
class TwoHandConfig:
    enabled: bool = False
    scale_offset: float = 0.2
    scale_gain: float = 6.0
    scale_min: float = 0.1
    scale_max: float = 8.0
    range_x: float = 1.1
    range_y: float = 0.9


@dataclass
class PointerConfig:
    rotate_gain: float = math.pi * 0.01
    scale_rate: float = 0.003
    viewport_pan_rate: float = 0.01
    fov_degrees: float = 60.0


_SECTIONS = {
    "fingers": FingerThresholds,
    "pinch": PinchConfig,
    "camera": CameraConfig,
    "pan": PanConfig,
    "rotate": RotateConfig,
    "scale": ScaleConfig,
    "two_hand": TwoHandConfig,
    "pointer": PointerConfig,
}


def _build_section(name: str, cls: type, data: dict[str, Any]):
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {name} option(s): {', '.join(sorted(unknown))}")
    return cls(**data)


@dataclass
class EngineConfig:
    """Complete engine configuration.

    `lock_center` keeps the manipulated object at the viewport centre: pans
    move the model instead of the camera and the model position decays back
    to the origin every tick by `center_decay`.
    """

    fingers: FingerThresholds = field(default_factory=FingerThresholds)
    pinch: PinchConfig = field(default_factory=PinchConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    pan: PanConfig = field(default_factory=PanConfig)
    rotate: RotateConfig = field(default_factory=RotateConfig)
    scale: ScaleConfig = field(default_factory=ScaleConfig)
    two_hand: TwoHandConfig = field(default_factory=TwoHandConfig)
    pointer: PointerConfig = field(default_factory=PointerConfig)
    lock_center: bool = True
    center_decay: float = 0.25
    span_epsilon: float = 0.001

    def validate(self) -> EngineConfig:
        """Reject configurations that would break hysteresis or clamps."""
        if self.pinch.start >= self.pinch.end:
            raise ValueError(
                f"pinch.start ({self.pinch.start}) must be below pinch.end ({self.pinch.end})"
            )
        if not 0.0 < self.pinch.ema_alpha <= 1.0:
            raise ValueError("pinch.ema_alpha must be in (0, 1]")
        if not 0.0 < self.pinch.ratio_clamp_min <= 1.0 <= self.pinch.ratio_clamp_max:
            raise ValueError("pinch ratio clamp must bracket 1.0")
        if not 0.0 < self.scale.baseline_min < self.scale.baseline_max:
            raise ValueError("scale.baseline_min must be positive and below baseline_max")
        if not 0.0 < self.two_hand.scale_min < self.two_hand.scale_max:
            raise ValueError("two_hand.scale_min must be positive and below scale_max")
        if not 0.0 < self.camera.min_distance < self.camera.max_distance:
            raise ValueError("camera.min_distance must be positive and below max_distance")
        if self.pan.max_pan_distance <= 0:
            raise ValueError("pan.max_pan_distance must be positive")
        if not 0.0 <= self.center_decay <= 1.0:
            raise ValueError("center_decay must be in [0, 1]")
        if self.span_epsilon <= 0:
            raise ValueError("span_epsilon must be positive")
        return self

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict | None) -> EngineConfig:
        data = dict(data or {})
        kwargs: dict[str, Any] = {}
        for name, section_cls in _SECTIONS.items():
            if name in data:
                kwargs[name] = _build_section(name, section_cls, data.pop(name) or {})

        scalars = {"lock_center", "center_decay", "span_epsilon"}
        unknown = set(data) - scalars
        if unknown:
            raise ValueError(f"Unknown config option(s): {', '.join(sorted(unknown))}")
        kwargs.update(data)

        return cls(**kwargs).validate()

    @classmethod
    def from_yaml(cls, path: str | Path) -> EngineConfig:
        """Load a config file; missing sections keep their defaults."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data)

    def to_yaml(self, path: str | Path):
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
