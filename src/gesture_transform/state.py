"""Per-engine gesture state: the active gesture and its continuation payload."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from gesture_transform.smoothing import PinchHysteresis, ema


class GestureKind(Enum):
    NONE = "none"
    FIST = "fist"
    TWO_FINGER = "two_finger"
    ONE_FINGER = "one_finger"
    THREE_FINGER = "three_finger"
    PINCH = "pinch"
    OPEN_PALM = "open_palm"
    ROTATE = "rotate"
    TWO_HAND = "two_hand"


PRIMARY_GROUP = (
    GestureKind.FIST,
    GestureKind.TWO_FINGER,
    GestureKind.ONE_FINGER,
    GestureKind.THREE_FINGER,
)
SECONDARY_GROUP = (GestureKind.PINCH, GestureKind.OPEN_PALM, GestureKind.ROTATE)


_LABELS = {
    GestureKind.NONE: "None",
    GestureKind.FIST: "Fist → Zoom in",
    GestureKind.TWO_FINGER: "Two fingers → Zoom out",
    GestureKind.ONE_FINGER: "One finger → Pan model",
    GestureKind.THREE_FINGER: "Three fingers → Pan model",
    GestureKind.PINCH: "Pinch → Scale",
    GestureKind.OPEN_PALM: "Open palm → Translate",
    GestureKind.ROTATE: "Index move → Rotate",
    GestureKind.TWO_HAND: "Two hands → Scale + Translate",
}


def gesture_label(kind: GestureKind, lock_center: bool = True) -> str:
    """Human-readable label shown by the UI for a gesture kind."""
    if kind is GestureKind.ONE_FINGER and not lock_center:
        return "One finger → Pan viewport"
    return _LABELS[kind]


@dataclass
class ActiveGesture:
    """The single active gesture plus whatever continuation state it needs.

    `last_position` serves the motion-driven gestures (pans, rotate);
    `ema` serves pinch. Both start empty on entry and vanish with the value
    when the gesture exits.
    """
    kind: GestureKind
    since: float
    last_position: Optional[tuple[float, float]] = None
    ema: Optional[float] = None

    def track(self, position: tuple[float, float]) -> Optional[tuple[float, float]]:
        """Record a new position and return the motion since the last one."""
        last = self.last_position
        self.last_position = position
        if last is None:
            return None
        return position[0] - last[0], position[1] - last[1]

    def smooth(self, raw: float, alpha: float) -> tuple[float, Optional[float]]:
        """Advance the pinch EMA. Returns (new_ema, previous_ema)."""
        previous = self.ema
        self.ema = ema(previous, raw, alpha)
        return self.ema, previous


@dataclass
class GestureState:
    """Everything the arbiter remembers between frames."""
    current: Optional[ActiveGesture] = None
    last_active: dict[GestureKind, float] = field(default_factory=dict)
    pinch: PinchHysteresis = field(default_factory=PinchHysteresis)

    @property
    def kind(self) -> GestureKind:
        return self.current.kind if self.current else GestureKind.NONE

    def is_active(self, kind: GestureKind) -> bool:
        return self.current is not None and self.current.kind is kind

    def activations(self) -> dict[GestureKind, bool]:
        """Per-kind active flags; at most one is True."""
        return {
            kind: self.is_active(kind)
            for kind in GestureKind
            if kind is not GestureKind.NONE
        }

    def reset(self):
        self.current = None
        self.last_active.clear()
        self.pinch.reset()


class TransitionType(Enum):
    ENTERED = "entered"
    CONTINUES = "continues"
    EXITED = "exited"


@dataclass
class TransitionEvent:
    """A frame-edge change (or continuation) of the active gesture."""
    type: TransitionType
    gesture: GestureKind
    label: str
    timestamp: float

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "gesture": self.gesture.value,
            "label": self.label,
            "timestamp": self.timestamp,
        }
