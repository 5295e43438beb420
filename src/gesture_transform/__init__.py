"""gesture-transform - Hand-gesture manipulation engine for 3D viewers."""

__version__ = "0.1.0"

from gesture_transform.config import EngineConfig
from gesture_transform.landmarks import HandLandmarks
from gesture_transform.state import GestureKind, TransitionEvent, TransitionType
from gesture_transform.arbiter import GestureArbiter
from gesture_transform.transform import CameraTarget, TargetTransform, TransformAccumulator
from gesture_transform.bimanual import TwoHandArbitrator
from gesture_transform.engine import GestureEngine
from gesture_transform.pointer import PointerController, PointerMode
from gesture_transform.recorder import (
    SessionPlayer,
    SessionRecorder,
    TransformRecorder,
    TransformReplayer,
)
from gesture_transform.metrics import MetricsCollector
