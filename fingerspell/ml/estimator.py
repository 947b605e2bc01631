"""
Per-finger curl and pointing-direction estimation for one hand pose.

Curl comes from the two internal bend angles of each finger's joint chain;
direction from the base -> tip vector matched against fixed reference
directions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from fingerspell.ml.fingers import (
    DEPTH_DIRECTIONS,
    FINGER_JOINTS,
    PLANAR_DIRECTIONS,
    Finger,
    FingerCurl,
    FingerDirection,
)
from fingerspell.ml.geometry import as_points, bend_angle, cosine_similarity, unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurlLimits:
    """
    Breakpoints (aggregate bend, degrees) between the three curl states.

    Confidence is 1.0 at a state's canonical bend and falls linearly to 0.5
    at the breakpoints, so a borderline finger never looks certain.
    """

    half_curl_start: float
    full_curl_start: float
    full_curl_canonical: float

    @property
    def half_curl_canonical(self) -> float:
        return (self.half_curl_start + self.full_curl_start) / 2.0

    def canonical(self, curl: FingerCurl) -> float:
        if curl is FingerCurl.NO_CURL:
            return 0.0
        if curl is FingerCurl.HALF_CURL:
            return self.half_curl_canonical
        return self.full_curl_canonical

    def classify(self, bend: float) -> tuple[FingerCurl, float]:
        bend = max(0.0, bend)

        if bend < self.half_curl_start:
            return FingerCurl.NO_CURL, 1.0 - 0.5 * bend / self.half_curl_start

        if bend < self.full_curl_start:
            half_span = (self.full_curl_start - self.half_curl_start) / 2.0
            off = abs(bend - self.half_curl_canonical)
            return FingerCurl.HALF_CURL, 1.0 - 0.5 * off / half_span

        if bend >= self.full_curl_canonical:
            return FingerCurl.FULL_CURL, 1.0
        span = self.full_curl_canonical - self.full_curl_start
        return FingerCurl.FULL_CURL, 0.5 + 0.5 * (bend - self.full_curl_start) / span


FINGER_CURL_LIMITS = CurlLimits(half_curl_start=50.0, full_curl_start=140.0, full_curl_canonical=200.0)
# the thumb has shorter segments and bends far less before it reads as closed
THUMB_CURL_LIMITS = CurlLimits(half_curl_start=30.0, full_curl_start=75.0, full_curl_canonical=110.0)


@dataclass(frozen=True)
class FingerState:
    finger: Finger
    curl: FingerCurl
    curl_confidence: float
    bend: float
    direction: Optional[FingerDirection]
    direction_confidence: float
    vector: tuple[float, float, float]

    def direction_agreement(self, direction: FingerDirection) -> float:
        """Cosine similarity between this finger and ``direction``, clamped to [0, 1]."""
        return max(0.0, cosine_similarity(self.vector, direction.vector))

    def to_dict(self) -> dict[str, Any]:
        return {
            "finger": self.finger.value,
            "curl": self.curl.value,
            "curl_confidence": self.curl_confidence,
            "bend": self.bend,
            "direction": self.direction.value if self.direction is not None else None,
            "direction_confidence": self.direction_confidence,
        }


@dataclass(frozen=True)
class FingerPose:
    """Curl and direction of all five fingers for one frame."""

    fingers: tuple[FingerState, ...]

    def __getitem__(self, finger: Finger) -> FingerState:
        for state in self.fingers:
            if state.finger is finger:
                return state
        raise KeyError(finger)

    def __iter__(self):
        return iter(self.fingers)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {state.finger.value: state.to_dict() for state in self.fingers}


class FingerPoseEstimator:
    def __init__(
        self,
        include_depth: bool = False,
        finger_limits: CurlLimits = FINGER_CURL_LIMITS,
        thumb_limits: CurlLimits = THUMB_CURL_LIMITS,
    ):
        self.include_depth = include_depth
        self.finger_limits = finger_limits
        self.thumb_limits = thumb_limits
        self._directions = DEPTH_DIRECTIONS if include_depth else PLANAR_DIRECTIONS

    def limits_for(self, finger: Finger) -> CurlLimits:
        return self.thumb_limits if finger is Finger.THUMB else self.finger_limits

    def estimate(self, landmarks: Any, aspect_ratio: float = 1.0) -> Optional[FingerPose]:
        """
        Estimate every finger's curl and direction.

        :param landmarks:
            21 landmarks in normalized image coordinates.
        :param aspect_ratio:
            Frame width / height. Normalized x (and MediaPipe's z, which shares
            x's scale) are stretched by it so angles are measured in an
            isotropic space.
        :returns:
            The finger pose, or None when the landmarks cannot be estimated
            (wrong count, non-numeric values).
        """
        pts = as_points(landmarks)
        if pts is None:
            logger.debug("cannot estimate finger pose: malformed landmarks")
            return None

        if aspect_ratio <= 0:
            aspect_ratio = 1.0
        pts = pts * np.array([aspect_ratio, 1.0, aspect_ratio])

        return FingerPose(fingers=tuple(self._estimate_finger(pts, finger) for finger in Finger))

    def _estimate_finger(self, pts: np.ndarray, finger: Finger) -> FingerState:
        base, mid, distal, tip = (pts[i] for i in FINGER_JOINTS[finger])

        bend = bend_angle(base, mid, distal) + bend_angle(mid, distal, tip)
        curl, curl_conf = self.limits_for(finger).classify(bend)

        raw = tip - base
        if not self.include_depth:
            raw = np.array([raw[0], raw[1], 0.0])
        vec = unit(raw)

        if vec is None:
            return FingerState(finger, curl, curl_conf, bend, None, 0.0, (0.0, 0.0, 0.0))

        best: Optional[FingerDirection] = None
        best_sim = -2.0
        for direction in self._directions:
            sim = cosine_similarity(vec, direction.vector)
            if sim > best_sim:
                best, best_sim = direction, sim

        return FingerState(
            finger=finger,
            curl=curl,
            curl_confidence=curl_conf,
            bend=bend,
            direction=best,
            direction_confidence=max(0.0, min(1.0, best_sim)),
            vector=(float(vec[0]), float(vec[1]), float(vec[2])),
        )
