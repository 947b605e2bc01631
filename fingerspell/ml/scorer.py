"""
Score hand poses against the gesture dictionary.

Every letter is scored over the same ten slots (five curls, five
directions), each worth at most 1.0, so raw scores share the 0..10 scale and
compare across letters without per-letter normalization.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

from fingerspell.ml.estimator import FingerPose, FingerPoseEstimator
from fingerspell.ml.fingers import Finger, FingerCurl
from fingerspell.ml.gestures import GestureDescription, GestureDictionary

logger = logging.getLogger(__name__)

MAX_SCORE = 10.0
DEFAULT_MIN_SCORE = 7.5

# contribution of a finger slot the letter does not constrain
NEUTRAL_SCORE = 0.6

# agreement by distance between detected and expected curl (same, adjacent, opposite)
CURL_AGREEMENT = (1.0, 0.5, 0.0)


@dataclass(frozen=True)
class Prediction:
    """What the UI shows: one letter and a confidence in [0, 1]."""

    letter: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {"letter": self.letter, "confidence": self.confidence}


@dataclass(frozen=True)
class GestureMatch:
    letter: str
    score: float

    @property
    def confidence(self) -> float:
        return max(0.0, min(1.0, self.score / MAX_SCORE))

    def to_prediction(self) -> Prediction:
        return Prediction(letter=self.letter, confidence=self.confidence)

    def to_dict(self) -> dict[str, Any]:
        return {"letter": self.letter, "score": self.score}


def curl_agreement(detected: FingerCurl, expected: FingerCurl) -> float:
    return CURL_AGREEMENT[abs(detected.rank - expected.rank)]


def score_description(description: GestureDescription, pose: FingerPose) -> float:
    score = 0.0
    for finger in Finger:
        state = pose[finger]

        curls = description.curls_for(finger)
        if curls:
            score += max(w * curl_agreement(state.curl, curl) for curl, w in curls)
        else:
            score += NEUTRAL_SCORE

        directions = description.directions_for(finger)
        if directions:
            score += max(w * state.direction_agreement(d) for d, w in directions)
        else:
            score += NEUTRAL_SCORE
    return score


class GestureEstimator:
    """Rank the letters of a gesture dictionary for one hand pose."""

    def __init__(
        self,
        gestures: GestureDictionary | Iterable[GestureDescription],
        pose_estimator: Optional[FingerPoseEstimator] = None,
    ):
        self.gestures = tuple(gestures)
        self.pose_estimator = pose_estimator or FingerPoseEstimator()

    def score_pose(self, pose: FingerPose) -> list[GestureMatch]:
        """All letters for an estimated pose, best first; ties keep dictionary order."""
        matches = [GestureMatch(g.letter, score_description(g, pose)) for g in self.gestures]
        # sorted() is stable, so equal scores stay in declaration order
        return sorted(matches, key=lambda m: -m.score)

    def estimate(
        self,
        landmarks: Any,
        min_score: float = DEFAULT_MIN_SCORE,
        aspect_ratio: float = 1.0,
    ) -> list[GestureMatch]:
        """
        Score one hand against every letter.

        Returns the letters scoring at least ``min_score``, best first.
        Malformed landmarks give an empty list without scoring.
        """
        pose = self.pose_estimator.estimate(landmarks, aspect_ratio=aspect_ratio)
        if pose is None:
            return []
        return [m for m in self.score_pose(pose) if m.score >= min_score]

    def predict(
        self,
        landmarks: Any,
        min_score: float = DEFAULT_MIN_SCORE,
        aspect_ratio: float = 1.0,
    ) -> Optional[GestureMatch]:
        matches = self.estimate(landmarks, min_score=min_score, aspect_ratio=aspect_ratio)
        return matches[0] if matches else None
