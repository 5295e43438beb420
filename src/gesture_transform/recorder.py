"""Recording and replay.

Two kinds of recordings:

- Transform recordings sample the engine's *output* (scale, rotation,
  position) at a fixed cadence. Replaying one writes those samples back into
  the accumulator while the live engine is suppressed, so no gesture
  classification happens during playback.
- Landmark sessions capture the engine's *input* (raw hand landmarks with
  timestamps) so a session can be fed through the engine again without a
  camera, e.g. in tests or CI.
"""

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterator, Optional, Sequence

import numpy as np

from gesture_transform.landmarks import as_hand
from gesture_transform.transform import TargetTransform


@dataclass
class TransformSample:
    """Target transform at `t` seconds after recording start."""
    t: float
    gesture_scale: float
    baseline_scale: float
    rotation_x: float
    rotation_y: float
    position_x: float
    position_y: float

    @classmethod
    def capture(cls, t: float, target: TargetTransform) -> TransformSample:
        return cls(
            t=t,
            gesture_scale=target.gesture_scale,
            baseline_scale=target.baseline_scale,
            rotation_x=target.rotation_x,
            rotation_y=target.rotation_y,
            position_x=target.position_x,
            position_y=target.position_y,
        )


class TransformRecorder:
    """Samples the target transform on a fixed cadence.

    Usage:
        recorder = TransformRecorder(interval=0.05)
        recorder.start()
        # on the render/timer loop:
        recorder.maybe_sample(engine.transform)
        recorder.stop()
    """

    def __init__(self, interval: float = 0.05):
        self.interval = interval
        self._samples: list[TransformSample] = []
        self._start: Optional[float] = None
        self._last_sample: Optional[float] = None
        self._recording = False

    def start(self, now: Optional[float] = None):
        self._samples = []
        self._start = now if now is not None else time.monotonic()
        self._last_sample = None
        self._recording = True

    def stop(self) -> int:
        self._recording = False
        return len(self._samples)

    def clear(self):
        self._samples = []

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def samples(self) -> list[TransformSample]:
        return list(self._samples)

    def maybe_sample(self, target: TargetTransform, now: Optional[float] = None) -> bool:
        """Record a sample if recording and at least one interval has passed."""
        if not self._recording:
            return False
        now = now if now is not None else time.monotonic()
        if self._last_sample is not None and now - self._last_sample < self.interval:
            return False
        self._last_sample = now
        self._samples.append(TransformSample.capture(now - self._start, target))
        return True

    def save(self, path: str | Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": 1,
            "kind": "transform",
            "interval": self.interval,
            "samples": [asdict(s) for s in self._samples],
        }
        with open(path, "w") as f:
            json.dump(data, f)

    @staticmethod
    def load(path: str | Path) -> list[TransformSample]:
        with open(path) as f:
            data = json.load(f)
        if data.get("kind") != "transform":
            raise ValueError(f"{path} is not a transform recording")
        return [TransformSample(**s) for s in data["samples"]]


class TransformReplayer:
    """Plays transform samples back into an engine's accumulator.

    The engine is suppressed for the duration of playback and resumed when
    the last sample has been applied (or `stop()` is called).
    """

    def __init__(self, samples: Sequence[TransformSample]):
        self._samples = sorted(samples, key=lambda s: s.t)
        self._engine = None
        self._start = 0.0
        self._index = 0

    @property
    def active(self) -> bool:
        return self._engine is not None

    def start(self, engine, now: Optional[float] = None) -> bool:
        """Begin playback. Returns False if already playing or empty."""
        if self.active or not self._samples:
            return False
        self._engine = engine
        self._start = now if now is not None else time.monotonic()
        self._index = 0
        engine.suppress()
        return True

    def advance(self, now: Optional[float] = None) -> int:
        """Apply every sample that is due. Returns how many were applied."""
        if not self.active:
            return 0
        now = now if now is not None else time.monotonic()
        elapsed = now - self._start

        applied = 0
        while self._index < len(self._samples) and self._samples[self._index].t <= elapsed:
            s = self._samples[self._index]
            self._engine.accumulator.load(
                s.gesture_scale,
                (s.rotation_x, s.rotation_y),
                (s.position_x, s.position_y),
                baseline_scale=s.baseline_scale,
            )
            self._index += 1
            applied += 1

        if self._index >= len(self._samples):
            self.stop()
        return applied

    def stop(self):
        if self._engine is not None:
            self._engine.resume()
        self._engine = None


@dataclass
class SessionFrame:
    """One recorded detector callback."""
    timestamp: float  # seconds from session start
    hands: list  # per hand: 21 x [x, y, z]


class SessionRecorder:
    """Records raw landmark frames for later replay through the engine."""

    def __init__(self):
        self._frames: list[SessionFrame] = []
        self._start: Optional[float] = None
        self._recording = False

    def start(self, now: Optional[float] = None):
        self._frames = []
        self._start = now if now is not None else time.monotonic()
        self._recording = True

    def stop(self) -> int:
        self._recording = False
        return len(self._frames)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        return self._frames[-1].timestamp if self._frames else 0.0

    def add_frame(self, hands: Sequence[np.ndarray], now: Optional[float] = None):
        if not self._recording:
            return
        now = now if now is not None else time.monotonic()
        self._frames.append(SessionFrame(
            timestamp=now - self._start,
            hands=[as_hand(h).tolist() for h in hands],
        ))

    def save(self, path: str | Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": 1,
            "kind": "landmarks",
            "frame_count": len(self._frames),
            "duration": self.duration,
            "frames": [asdict(f) for f in self._frames],
        }
        with open(path, "w") as f:
            json.dump(data, f)


class SessionPlayer:
    """Replays a landmark session.

    Usage:
        player = SessionPlayer.load("session.json")
        for frame in player.play():
            engine.process(frame.hands, timestamp=frame.timestamp)
    """

    def __init__(self, frames: list[SessionFrame]):
        self._frames = frames

    @classmethod
    def load(cls, path: str | Path) -> SessionPlayer:
        with open(path) as f:
            data = json.load(f)
        if data.get("kind", "landmarks") != "landmarks":
            raise ValueError(f"{path} is not a landmark session")
        frames = [
            SessionFrame(timestamp=fr["timestamp"], hands=fr["hands"])
            for fr in data["frames"]
        ]
        return cls(frames)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        return self._frames[-1].timestamp if self._frames else 0.0

    def play(self) -> Iterator[SessionFrame]:
        """Yield frames with hands as numpy arrays, no timing."""
        for frame in self._frames:
            yield SessionFrame(
                timestamp=frame.timestamp,
                hands=[np.array(h, dtype=np.float64) for h in frame.hands],
            )

    def play_realtime(self, speed: float = 1.0) -> Iterator[SessionFrame]:
        """Yield frames at their recorded pace, scaled by `speed`.

        Raises:
            ValueError: if `speed` is not positive.
        """
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        start = time.monotonic()
        for frame in self.play():
            target_time = frame.timestamp / speed
            elapsed = time.monotonic() - start
            if target_time > elapsed:
                time.sleep(target_time - elapsed)
            yield frame
