"""Local recognition: landmarks from the feed, scored by the gesture estimator."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Optional

from fingerspell.exceptions import LandmarkerUnavailableError
from fingerspell.ml.landmarks import Hands, LandmarkFeed, Point
from fingerspell.ml.scorer import DEFAULT_MIN_SCORE, GestureEstimator, Prediction

logger = logging.getLogger(__name__)


def frame_aspect_ratio(frame: Any) -> float:
    shape = getattr(frame, "shape", None)
    if not shape or len(shape) < 2 or not shape[0]:
        return 1.0
    return float(shape[1]) / float(shape[0])


class RecognitionSession:
    """
    Stateful glue between a landmark feed and the gesture estimator.

    Call :meth:`tick` once per camera frame. A tick that arrives while the
    previous one is still waiting on the landmarker is dropped, not queued.
    """

    def __init__(
        self,
        feed: LandmarkFeed,
        estimator: GestureEstimator,
        min_score: float = DEFAULT_MIN_SCORE,
        on_update: Optional[Callable[[RecognitionSession], None]] = None,
    ):
        self._feed = feed
        self._estimator = estimator
        self.min_score = min_score
        self._on_update = on_update

        self._running = False
        self._in_flight = False
        self._unregister: Optional[Callable[[], None]] = None

        self.prediction: Optional[Prediction] = None
        self.hand_detected = False
        self.landmarks: Optional[list[Point]] = None
        self.error: Optional[str] = None
        self.frames_processed = 0
        self.frames_dropped = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self.error = None
        self._unregister = self._feed.register(self._handle_landmarks)

    def stop(self) -> None:
        self._running = False
        if self._unregister is not None:
            self._unregister()
            self._unregister = None
        self.prediction = None
        self.hand_detected = False
        self.landmarks = None

    async def tick(self, frame: Any) -> bool:
        """Send one frame to the landmarker. Returns False if the frame was skipped."""
        if not self._running:
            return False
        if self._in_flight:
            self.frames_dropped += 1
            return False

        self._in_flight = True
        try:
            await self._feed.send(frame)
        except LandmarkerUnavailableError as exc:
            if self._running and self.error != str(exc):
                self.error = str(exc)
                self._publish()
            return False
        finally:
            self._in_flight = False
        return True

    def _handle_landmarks(self, frame: Any, hands: Hands) -> None:
        if not self._running:
            return
        self.process_hands(hands, aspect_ratio=frame_aspect_ratio(frame))

    def process_hands(self, hands: Optional[Hands], aspect_ratio: float = 1.0) -> Optional[Prediction]:
        """Update the session from one frame's detected hands (first hand wins)."""
        self.frames_processed += 1

        if not hands:
            self.hand_detected = False
            self.landmarks = None
            self.prediction = None
            self._publish()
            return None

        hand = hands[0]
        self.hand_detected = True
        self.landmarks = list(hand)

        best = self._estimator.predict(hand, min_score=self.min_score, aspect_ratio=aspect_ratio)
        self.prediction = best.to_prediction() if best is not None else None
        self._publish()
        return self.prediction

    def _publish(self) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(self)
        except Exception:
            logger.exception("recognition update callback failed")
