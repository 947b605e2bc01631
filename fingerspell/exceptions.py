"""Exception hierarchy shared by the recognizer, the relay and the API."""

from typing import Optional


class FingerspellError(Exception):
    """Base exception for fingerspell errors."""


class GestureDefinitionError(FingerspellError, ValueError):
    """Raised when the gesture dictionary is built with invalid entries."""


class LandmarkerUnavailableError(FingerspellError):
    """Raised when the hand landmarker cannot be created or was shut down."""


class RelayConfigurationError(FingerspellError):
    """Raised when the remote model relay has no endpoint configured."""


class RelayError(FingerspellError):
    """Raised when the remote model endpoint fails or cannot be reached."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: Optional[str] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details
        self.retry_after = retry_after

    @property
    def is_warming_up(self) -> bool:
        return self.status_code == 503
