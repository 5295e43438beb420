"""Synthetic hand poses for tests and benchmarks.

Builds anatomically ordered 21-landmark hands in image coordinates (y down)
around a fixed palm. Closed fingertips sit `curl` away from the palm centre;
extended ones point up, well past the extension threshold.
"""

from __future__ import annotations

from typing import Iterable, Optional

import numpy as np

from gesture_transform.landmarks import HandLandmarks

H = HandLandmarks

# Palm base and knuckles. Palm centre is (0.508, 0.498), span ~0.1217.
_PALM = {
    H.WRIST: (0.50, 0.60),
    H.INDEX_MCP: (0.45, 0.47),
    H.MIDDLE_MCP: (0.49, 0.46),
    H.RING_MCP: (0.53, 0.47),
    H.PINKY_MCP: (0.57, 0.49),
}

# Extended fingertips, spread so index-middle clears the open-palm gap
_EXTENDED = {
    H.THUMB_TIP: (0.36, 0.45),
    H.INDEX_TIP: (0.40, 0.28),
    H.MIDDLE_TIP: (0.50, 0.23),
    H.RING_TIP: (0.58, 0.26),
    H.PINKY_TIP: (0.64, 0.33),
}

# Direction from palm centre toward each curled fingertip
_CURL_DIRECTION = {
    H.THUMB_TIP: (-1.0, 0.3),
    H.INDEX_TIP: (-0.6, -0.4),
    H.MIDDLE_TIP: (0.0, -1.0),
    H.RING_TIP: (0.5, -0.5),
    H.PINKY_TIP: (1.0, 0.2),
}

# Each finger's chain: base joint, then the two joints before the tip
_CHAINS = {
    H.THUMB_TIP: (H.THUMB_CMC, (H.THUMB_MCP, H.THUMB_IP)),
    H.INDEX_TIP: (H.INDEX_MCP, (H.INDEX_PIP, H.INDEX_DIP)),
    H.MIDDLE_TIP: (H.MIDDLE_MCP, (H.MIDDLE_PIP, H.MIDDLE_DIP)),
    H.RING_TIP: (H.RING_MCP, (H.RING_PIP, H.RING_DIP)),
    H.PINKY_TIP: (H.PINKY_MCP, (H.PINKY_PIP, H.PINKY_DIP)),
}

PALM_CENTER = np.mean([_PALM[i] for i in H.PALM_INDICES], axis=0)
SPAN = float(np.linalg.norm(np.subtract(_PALM[H.INDEX_MCP], _PALM[H.PINKY_MCP])))

FINGER_NAMES = {
    "thumb": H.THUMB_TIP,
    "index": H.INDEX_TIP,
    "middle": H.MIDDLE_TIP,
    "ring": H.RING_TIP,
    "pinky": H.PINKY_TIP,
}


def make_hand(
    extended: Iterable[str] = (),
    curl: float = 0.07,
    offset: tuple[float, float] = (0.0, 0.0),
    tips: Optional[dict[int, tuple[float, float]]] = None,
) -> np.ndarray:
    """Build a (21, 3) hand.

    Args:
        extended: Finger names ("thumb", "index", ...) to extend.
        curl: Palm-centre distance of curled fingertips.
        offset: Translation applied to the whole hand.
        tips: Explicit fingertip positions, applied before `offset`.
    """
    extended = {FINGER_NAMES[name] for name in extended}
    lm = np.zeros((21, 3), dtype=np.float64)

    for idx, (x, y) in _PALM.items():
        lm[idx, :2] = (x, y)
    lm[H.THUMB_CMC, :2] = (0.46, 0.56)

    for tip, direction in _CURL_DIRECTION.items():
        if tip in extended:
            lm[tip, :2] = _EXTENDED[tip]
        else:
            d = np.asarray(direction) / np.linalg.norm(direction)
            lm[tip, :2] = PALM_CENTER + curl * d

    for tip, (x, y) in (tips or {}).items():
        lm[tip, :2] = (x, y)

    # Intermediate joints interpolated between base and tip
    for tip, (base, joints) in _CHAINS.items():
        for k, joint in enumerate(joints, start=1):
            lm[joint, :2] = lm[base, :2] + (lm[tip, :2] - lm[base, :2]) * k / 3

    lm[:, :2] += offset
    return lm


def make_fist(offset: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    return make_hand(curl=0.03, offset=offset)


def make_one_finger(offset: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    return make_hand(["index"], offset=offset)


def make_two_fingers(offset: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    return make_hand(["index", "middle"], offset=offset)


def make_three_fingers(offset: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    return make_hand(["index", "middle", "ring"], offset=offset)


def make_open_palm(offset: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    return make_hand(["thumb", "index", "middle", "ring", "pinky"], offset=offset)


def make_pinch(norm: float, offset: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    """Index extended with the thumb tip `norm` hand-spans to its right."""
    ix, iy = _EXTENDED[H.INDEX_TIP]
    return make_hand(
        ["index", "thumb"],
        offset=offset,
        tips={H.THUMB_TIP: (ix + norm * SPAN, iy)},
    )


def make_rotate(offset: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    """Open hand with index and middle together: no static gesture matches."""
    ix, iy = _EXTENDED[H.INDEX_TIP]
    return make_hand(
        ["thumb", "index", "middle", "ring", "pinky"],
        offset=offset,
        tips={H.MIDDLE_TIP: (ix + 0.03, iy - 0.03)},
    )
