"""
Relay to the remote image-classification model.

The model endpoint sleeps when idle and answers 503 while it warms up, so
the relay retries 503s with a linear backoff. Everything else is passed
through to the caller.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Optional

import requests

from fingerspell.exceptions import RelayConfigurationError, RelayError
from fingerspell.ml.scorer import Prediction

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.9


class ModelRelay:
    def __init__(
        self,
        url: Optional[str],
        max_attempts: int = 5,
        backoff_s: float = 3.0,
        timeout_s: float = 30.0,
        retry_after_s: float = 15.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.url = (url or "").strip()
        self.max_attempts = max(1, int(max_attempts))
        self.backoff_s = backoff_s
        self.timeout_s = timeout_s
        self.retry_after_s = retry_after_s
        self._session = session or requests.Session()
        self._sleep = sleep

    @property
    def configured(self) -> bool:
        return bool(self.url)

    def predict(self, image_data: str) -> Any:
        """
        Send one base64 image to the model and return its JSON unmodified.

        :raises RelayConfigurationError:
            If no model URL is configured.
        :raises RelayError:
            On a non-2xx answer, when 503 retries run out, or when the
            endpoint cannot be reached.
        """
        if not self.configured:
            raise RelayConfigurationError("Model API URL not configured")

        attempt = 0
        while True:
            attempt += 1
            try:
                response = self._session.post(
                    self.url,
                    json={"image": image_data},
                    timeout=self.timeout_s,
                )
            except requests.RequestException as exc:
                logger.error("model API unreachable: %s", exc)
                raise RelayError(500, "Model API request failed", details=str(exc)) from exc

            if response.status_code == 503:
                if attempt >= self.max_attempts:
                    logger.warning("model API still warming up after %d attempts", attempt)
                    raise RelayError(
                        503,
                        "Model is warming up",
                        details=response.text,
                        retry_after=self.retry_after_s,
                    )
                delay = self.backoff_s * attempt
                logger.info(
                    "model API warming up (attempt %d/%d), retrying in %.1fs",
                    attempt, self.max_attempts, delay,
                )
                self._sleep(delay)
                continue

            if not response.ok:
                logger.error("model API error: %s %s", response.status_code, response.text)
                raise RelayError(response.status_code, "Model prediction failed", details=response.text)

            try:
                prediction = response.json()
            except ValueError as exc:
                raise RelayError(502, "Model API returned invalid JSON", details=response.text) from exc
            logger.debug("prediction received: %s", prediction)
            return prediction


def normalize_prediction(payload: Any) -> Optional[Prediction]:
    """
    Read a model answer in either of its shapes:
    ``{"letter": ..., "confidence": ...}`` or ``[{"label": ..., "score": ...}, ...]``.
    """
    if isinstance(payload, dict) and payload.get("letter"):
        confidence = payload.get("confidence")
        if not isinstance(confidence, (int, float)) or isinstance(confidence, bool):
            confidence = DEFAULT_CONFIDENCE
        return Prediction(letter=str(payload["letter"]), confidence=float(confidence))

    if isinstance(payload, list) and payload and isinstance(payload[0], dict) and payload[0].get("label"):
        top = payload[0]
        score = top.get("score")
        if not isinstance(score, (int, float)) or isinstance(score, bool):
            score = 0.0
        return Prediction(letter=str(top["label"]), confidence=float(score))

    return None
