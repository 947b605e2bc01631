"""
Remote recognition: periodically send a crop of the hand to the image model.

Runs beside the local session on the same landmark feed and only fires
while a hand is in view.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any, Optional

from fingerspell.exceptions import FingerspellError, RelayError
from fingerspell.ml.imaging import CROP_PADDING, CROP_SIZE, crop_hand, encode_jpeg_data_url
from fingerspell.ml.landmarks import Hands, LandmarkFeed, Point
from fingerspell.ml.relay import ModelRelay, normalize_prediction
from fingerspell.ml.scorer import Prediction

logger = logging.getLogger(__name__)

WARMING_UP_MESSAGE = "Model is waking up. Retrying in a few seconds..."
FAILED_MESSAGE = "Prediction failed. Please try again."


class RemoteRecognitionSession:
    def __init__(
        self,
        feed: LandmarkFeed,
        relay: ModelRelay,
        interval_s: float = 1.0,
        cooldown_s: float = 15.0,
        crop_size: int = CROP_SIZE,
        padding: float = CROP_PADDING,
        on_update: Optional[Callable[[RemoteRecognitionSession], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._feed = feed
        self._relay = relay
        self.interval_s = interval_s
        self.cooldown_s = cooldown_s
        self.crop_size = crop_size
        self.padding = padding
        self._on_update = on_update
        self._clock = clock

        self._running = False
        self._in_flight = False
        self._unregister: Optional[Callable[[], None]] = None
        self._timer: Optional[asyncio.Task] = None
        self._latest: Optional[tuple[Any, list[Point]]] = None
        self._request_id = 0
        self._cooldown_until = 0.0

        self.prediction: Optional[Prediction] = None
        self.error: Optional[str] = None
        self.requests_sent = 0
        self.responses_discarded = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def hand_present(self) -> bool:
        return self._latest is not None

    @property
    def in_cooldown(self) -> bool:
        return self._clock() < self._cooldown_until

    def start(self) -> None:
        """Register on the feed and start the capture timer (needs a running event loop)."""
        if self._running:
            return
        self._running = True
        self.error = None
        self._unregister = self._feed.register(self._handle_landmarks)
        self._timer = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        self._running = False
        self._latest = None
        # invalidates any request still in flight
        self._request_id += 1
        if self._unregister is not None:
            self._unregister()
            self._unregister = None
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass
        self.prediction = None

    def _handle_landmarks(self, frame: Any, hands: Hands) -> None:
        if not self._running:
            return
        self._latest = (frame, list(hands[0])) if hands else None

    async def _run(self) -> None:
        while self._running:
            await asyncio.sleep(self.interval_s)
            try:
                await self.capture()
            except Exception:
                logger.exception("remote capture failed")
                self.error = FAILED_MESSAGE
                self._publish()

    async def capture(self) -> bool:
        """
        Send the latest hand crop to the model once.

        Returns True when a fresh prediction was stored. Skips (False) when
        stopped, busy, cooling down, or when no hand is in view.
        """
        if not self._running or self._in_flight or self._latest is None:
            return False
        if self.in_cooldown:
            return False

        frame, hand = self._latest
        crop = crop_hand(frame, hand, padding=self.padding, size=self.crop_size)
        if crop is None:
            return False
        image_data = encode_jpeg_data_url(crop)

        self._request_id += 1
        request_id = self._request_id
        self._in_flight = True
        self.requests_sent += 1
        loop = asyncio.get_running_loop()
        try:
            payload = await loop.run_in_executor(None, self._relay.predict, image_data)
        except RelayError as exc:
            if not self._is_current(request_id):
                return False
            if exc.is_warming_up:
                wait = exc.retry_after if exc.retry_after is not None else self.cooldown_s
                self._cooldown_until = self._clock() + wait
                self.error = WARMING_UP_MESSAGE
            else:
                self.error = FAILED_MESSAGE
            logger.warning("remote prediction failed: %s (status %s)", exc.message, exc.status_code)
            self._publish()
            return False
        except FingerspellError as exc:
            if not self._is_current(request_id):
                return False
            logger.error("remote prediction unavailable: %s", exc)
            self.error = FAILED_MESSAGE
            self._publish()
            return False
        finally:
            self._in_flight = False

        if not self._is_current(request_id):
            return False

        self.error = None
        prediction = normalize_prediction(payload)
        if prediction is not None:
            self.prediction = prediction
        self._publish()
        return prediction is not None

    def _is_current(self, request_id: int) -> bool:
        if self._running and request_id == self._request_id:
            return True
        self.responses_discarded += 1
        logger.debug("discarding stale remote response #%d", request_id)
        return False

    def _publish(self) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(self)
        except Exception:
            logger.exception("remote update callback failed")
