"""Landmark frame normalizer.

Wraps one hand's 21 detector landmarks and derives the palm-centre and
hand-span reference values every classifier measures against. All distances
are taken in the image plane; depth (z) is ignored.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

NUM_LANDMARKS = 21
LANDMARK_DIM = 3  # x, y, z


def as_hand(points: Sequence | np.ndarray) -> np.ndarray:
    """Convert one hand's landmarks to a float array of shape (21, 3).

    Accepts nested lists or arrays with 2 or 3 columns (z defaults to 0).

    Raises:
        ValueError: if the landmark count or dimensionality is wrong.
    """
    arr = np.asarray(points, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[0] != NUM_LANDMARKS or arr.shape[1] not in (2, 3):
        raise ValueError(
            f"Expected {NUM_LANDMARKS} landmarks of (x, y[, z]), got shape {arr.shape}"
        )
    if arr.shape[1] == 2:
        arr = np.hstack([arr, np.zeros((NUM_LANDMARKS, 1))])
    return arr


def is_finite(points: np.ndarray) -> bool:
    """True if no landmark coordinate is NaN or infinite."""
    return bool(np.all(np.isfinite(points)))


class HandLandmarks:
    """One hand in a palm-relative, span-normalized measuring frame.

    Landmark indices follow the MediaPipe hand model and must not be
    reordered.
    """

    WRIST = 0
    THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
    INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
    MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
    RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
    PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

    PALM_INDICES = (WRIST, INDEX_MCP, MIDDLE_MCP, RING_MCP, PINKY_MCP)
    FINGERTIPS = (THUMB_TIP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP)

    # fingertip -> knuckle base, for the pointing-up test
    KNUCKLE_OF = {
        INDEX_TIP: INDEX_MCP,
        MIDDLE_TIP: MIDDLE_MCP,
        RING_TIP: RING_MCP,
        PINKY_TIP: PINKY_MCP,
    }

    def __init__(self, points: Sequence | np.ndarray, span_epsilon: float = 0.001):
        self.points = as_hand(points)
        self._xy = self.points[:, :2]
        self.palm_center = self._xy[list(self.PALM_INDICES)].mean(axis=0)
        self.span = max(span_epsilon, self.distance(self.INDEX_MCP, self.PINKY_MCP))

    def point(self, index: int) -> np.ndarray:
        """Image-plane (x, y) of a landmark."""
        return self._xy[index]

    def distance(self, a: int, b: int) -> float:
        return float(np.linalg.norm(self._xy[a] - self._xy[b]))

    def distance_to_palm(self, index: int) -> float:
        return float(np.linalg.norm(self._xy[index] - self.palm_center))

    def normalized_distance(self, index: int, reference: int) -> float:
        """Distance between two landmarks in units of hand span."""
        return self.distance(index, reference) / self.span

    def points_up(self, tip: int) -> bool:
        """Fingertip above its knuckle base (image y grows downward)."""
        return bool(self._xy[tip][1] < self._xy[self.KNUCKLE_OF[tip]][1])

    def centroid(self, indices: Sequence[int]) -> tuple[float, float]:
        c = self._xy[list(indices)].mean(axis=0)
        return float(c[0]), float(c[1])

    def __repr__(self) -> str:
        cx, cy = self.palm_center
        return f"HandLandmarks(palm=({cx:.3f}, {cy:.3f}), span={self.span:.4f})"
