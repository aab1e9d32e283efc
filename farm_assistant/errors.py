"""Error taxonomy shared by the capture, upload and display layers."""
from __future__ import annotations

from typing import Optional

UNKNOWN_ERROR = "Unknown error"


class FarmAssistantError(Exception):
    """Base class for every recoverable failure a screen can show inline."""

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or UNKNOWN_ERROR
        super().__init__(self.message)


class PermissionDenied(FarmAssistantError):
    pass


class NoMediaSelected(FarmAssistantError):
    def __init__(self, message: str = "Please select or capture an image first.") -> None:
        super().__init__(message)


class InvalidQuery(FarmAssistantError):
    def __init__(self, message: str = "Please enter a pest query.") -> None:
        super().__init__(message)


class CaptureError(FarmAssistantError):
    def __init__(self, message: str = "Failed to capture image from camera.") -> None:
        super().__init__(message)


class TransportFailure(FarmAssistantError):
    """Connection level failure; the message is the underlying exception's."""


class ServiceError(FarmAssistantError):
    """Non-2xx response from the service."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Status: {status_code}, Details: {body}")


class MalformedResponse(FarmAssistantError):
    """2xx response whose body lacks the fields the endpoint promises."""
