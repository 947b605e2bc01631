"""Hand topology and the discrete finger states used by the gesture dictionary."""

from __future__ import annotations

import math
from enum import Enum

LANDMARK_COUNT = 21
WRIST = 0


class Finger(str, Enum):
    THUMB = "Thumb"
    INDEX = "Index"
    MIDDLE = "Middle"
    RING = "Ring"
    PINKY = "Pinky"


# Landmark indices of each finger's joint chain, base first.
# The thumb starts at its CMC, which stands in for the wrist.
FINGER_JOINTS: dict[Finger, tuple[int, int, int, int]] = {
    Finger.THUMB: (1, 2, 3, 4),
    Finger.INDEX: (5, 6, 7, 8),
    Finger.MIDDLE: (9, 10, 11, 12),
    Finger.RING: (13, 14, 15, 16),
    Finger.PINKY: (17, 18, 19, 20),
}


class FingerCurl(str, Enum):
    NO_CURL = "NoCurl"
    HALF_CURL = "HalfCurl"
    FULL_CURL = "FullCurl"

    @property
    def rank(self) -> int:
        """Position on the straight -> bent scale (0, 1, 2)."""
        return _CURL_RANK[self]


_CURL_RANK = {
    FingerCurl.NO_CURL: 0,
    FingerCurl.HALF_CURL: 1,
    FingerCurl.FULL_CURL: 2,
}


class FingerDirection(str, Enum):
    VERTICAL_UP = "VerticalUp"
    VERTICAL_DOWN = "VerticalDown"
    HORIZONTAL_LEFT = "HorizontalLeft"
    HORIZONTAL_RIGHT = "HorizontalRight"
    DIAGONAL_UP_LEFT = "DiagonalUpLeft"
    DIAGONAL_UP_RIGHT = "DiagonalUpRight"
    DIAGONAL_DOWN_LEFT = "DiagonalDownLeft"
    DIAGONAL_DOWN_RIGHT = "DiagonalDownRight"
    TOWARD_CAMERA = "TowardCamera"
    AWAY_FROM_CAMERA = "AwayFromCamera"

    @property
    def vector(self) -> tuple[float, float, float]:
        """Unit vector in image space (y grows downward, z < 0 is toward the camera)."""
        return DIRECTION_VECTORS[self]


_D = math.sqrt(0.5)

DIRECTION_VECTORS: dict[FingerDirection, tuple[float, float, float]] = {
    FingerDirection.VERTICAL_UP: (0.0, -1.0, 0.0),
    FingerDirection.VERTICAL_DOWN: (0.0, 1.0, 0.0),
    FingerDirection.HORIZONTAL_LEFT: (-1.0, 0.0, 0.0),
    FingerDirection.HORIZONTAL_RIGHT: (1.0, 0.0, 0.0),
    FingerDirection.DIAGONAL_UP_LEFT: (-_D, -_D, 0.0),
    FingerDirection.DIAGONAL_UP_RIGHT: (_D, -_D, 0.0),
    FingerDirection.DIAGONAL_DOWN_LEFT: (-_D, _D, 0.0),
    FingerDirection.DIAGONAL_DOWN_RIGHT: (_D, _D, 0.0),
    FingerDirection.TOWARD_CAMERA: (0.0, 0.0, -1.0),
    FingerDirection.AWAY_FROM_CAMERA: (0.0, 0.0, 1.0),
}

PLANAR_DIRECTIONS: tuple[FingerDirection, ...] = tuple(
    d for d in FingerDirection if DIRECTION_VECTORS[d][2] == 0.0
)
DEPTH_DIRECTIONS: tuple[FingerDirection, ...] = tuple(FingerDirection)


def coerce_finger(value: Finger | str) -> Finger:
    """Accept a :class:`Finger` or its name (``"Index"``, ``"index"``, ``"INDEX"``)."""
    if isinstance(value, Finger):
        return value
    if isinstance(value, str):
        for finger in Finger:
            if value.lower() in (finger.value.lower(), finger.name.lower()):
                return finger
    raise ValueError(f"Unknown finger: {value!r}")
