"""Prometheus-compatible metrics for the gesture engine.

Renders the Prometheus text exposition format directly; no client library
needed. Readers (an HTTP handler, the CLI) may run on another thread than
the engine, so counters are guarded by a lock.

Tracked metrics:
- gesture_transform_frames_total (counter)
- gesture_transform_hands_detected_total (counter)
- gesture_transform_suppressed_frames_total (counter)
- gesture_transform_dropped_hands_total (counter, non-finite landmarks)
- gesture_transform_resets_total (counter, zero-hand resets)
- gesture_transform_gesture_entries_total (counter, by gesture)
- gesture_transform_frame_latency_seconds (histogram)
- gesture_transform_hand_detection_rate (gauge)
"""

from __future__ import annotations

import threading
import time
from collections import Counter


class _Histogram:
    """Cumulative-bucket histogram."""

    def __init__(self, buckets: list[float]):
        self.buckets = sorted(buckets)
        self.bucket_counts = [0] * len(self.buckets)
        self.count = 0
        self.sum = 0.0
        self._lock = threading.Lock()

    def observe(self, value: float):
        with self._lock:
            self.count += 1
            self.sum += value
            for i, b in enumerate(self.buckets):
                if value <= b:
                    self.bucket_counts[i] += 1
                    break

    def render(self, name: str, help_text: str) -> list[str]:
        lines = [f"# HELP {name} {help_text}", f"# TYPE {name} histogram"]
        with self._lock:
            cumulative = 0
            for b, n in zip(self.buckets, self.bucket_counts):
                cumulative += n
                lines.append(f'{name}_bucket{{le="{b}"}} {cumulative}')
            lines.append(f'{name}_bucket{{le="+Inf"}} {self.count}')
            lines.append(f"{name}_sum {self.sum:.6f}")
            lines.append(f"{name}_count {self.count}")
        return lines


class MetricsCollector:
    """Counters and latency histogram fed by `GestureEngine.process`."""

    PREFIX = "gesture_transform"

    def __init__(self):
        self._entries: Counter = Counter()
        self._frames_total = 0
        self._hands_total = 0
        self._suppressed_total = 0
        self._dropped_total = 0
        self._resets_total = 0
        self._hand_detection_rate = 0.0
        self._lock = threading.Lock()

        # Engine work is sub-millisecond; buckets from 50us to 10ms
        self._latency = _Histogram(
            [0.00005, 0.0001, 0.00025, 0.0005, 0.001, 0.0025, 0.005, 0.010]
        )
        self._start_time = time.time()

    def record_frame(self, latency_seconds: float, hands_detected: int):
        with self._lock:
            self._frames_total += 1
            self._hands_total += hands_detected
            rate = 1.0 if hands_detected > 0 else 0.0
            self._hand_detection_rate = 0.95 * self._hand_detection_rate + 0.05 * rate
        self._latency.observe(latency_seconds)

    def record_entry(self, gesture: str):
        with self._lock:
            self._entries[gesture] += 1

    def record_suppressed(self):
        with self._lock:
            self._suppressed_total += 1

    def record_dropped(self, count: int = 1):
        with self._lock:
            self._dropped_total += count

    def record_reset(self):
        with self._lock:
            self._resets_total += 1

    @property
    def gesture_entries(self) -> dict[str, int]:
        with self._lock:
            return dict(self._entries)

    @property
    def frames_total(self) -> int:
        return self._frames_total

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "frames": self._frames_total,
                "hands": self._hands_total,
                "suppressed": self._suppressed_total,
                "dropped_hands": self._dropped_total,
                "resets": self._resets_total,
                "entries": dict(self._entries),
                "hand_detection_rate": round(self._hand_detection_rate, 4),
            }

    def _counter(self, lines: list[str], name: str, help_text: str, value: int):
        full = f"{self.PREFIX}_{name}"
        lines.append(f"# HELP {full} {help_text}")
        lines.append(f"# TYPE {full} counter")
        lines.append(f"{full} {value}")
        lines.append("")

    def render(self) -> str:
        """Render all metrics in Prometheus text exposition format."""
        p = self.PREFIX
        lines: list[str] = []

        lines.append(f"# HELP {p}_uptime_seconds Time since collector creation")
        lines.append(f"# TYPE {p}_uptime_seconds gauge")
        lines.append(f"{p}_uptime_seconds {time.time() - self._start_time:.1f}")
        lines.append("")

        with self._lock:
            counters = [
                ("frames_total", "Total frames processed", self._frames_total),
                ("hands_detected_total", "Total hands across all frames", self._hands_total),
                ("suppressed_frames_total", "Frames skipped while suppressed", self._suppressed_total),
                ("dropped_hands_total", "Hands dropped for non-finite landmarks", self._dropped_total),
                ("resets_total", "Zero-hand state resets", self._resets_total),
            ]
            entries = sorted(self._entries.items())
            rate = self._hand_detection_rate

        for name, help_text, value in counters:
            self._counter(lines, name, help_text, value)

        lines.append(f"# HELP {p}_gesture_entries_total Gesture activations by kind")
        lines.append(f"# TYPE {p}_gesture_entries_total counter")
        for name, count in entries:
            lines.append(f'{p}_gesture_entries_total{{gesture="{name}"}} {count}')
        lines.append("")

        lines.extend(self._latency.render(
            f"{p}_frame_latency_seconds", "Engine processing latency per frame"
        ))
        lines.append("")

        lines.append(f"# HELP {p}_hand_detection_rate Exponential moving average of hand presence")
        lines.append(f"# TYPE {p}_hand_detection_rate gauge")
        lines.append(f"{p}_hand_detection_rate {rate:.4f}")
        lines.append("")

        return "\n".join(lines) + "\n"
