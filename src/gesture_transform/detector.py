"""Webcam landmark source using MediaPipe Hands.

The engine consumes raw image-normalized landmarks (x, y in [0, 1], y down),
so no wrist-centering or rescaling happens here.
"""

from __future__ import annotations

import numpy as np

try:
    import mediapipe as mp
except ImportError:
    mp = None


class HandDetector:
    """Produces one (21, 3) landmark array per detected hand.

    Requires the `camera` extra (mediapipe, opencv-python).
    """

    def __init__(
        self,
        max_hands: int = 2,
        min_detection_confidence: float = 0.7,
        min_tracking_confidence: float = 0.5,
    ):
        if mp is None:
            raise ImportError(
                "mediapipe is required. Install with: pip install 'gesture-transform[camera]'"
            )

        self.max_hands = max_hands
        self._hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            max_num_hands=max_hands,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    def detect(self, frame_rgb: np.ndarray) -> list[np.ndarray]:
        """Detect hands in an RGB frame (H, W, 3), uint8.

        Returns an empty list when no hand is visible.
        """
        results = self._hands.process(frame_rgb)
        if not results.multi_hand_landmarks:
            return []

        return [
            np.array([[lm.x, lm.y, lm.z] for lm in hand.landmark], dtype=np.float64)
            for hand in results.multi_hand_landmarks
        ]

    def close(self):
        self._hands.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
