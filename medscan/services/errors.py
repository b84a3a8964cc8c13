"""
errors.py

Exceptions raised by the label scan pipeline and the medication store client.

Every stage failure is terminal for that scan. The API layer turns these
into HTTP errors; the mobile client shows `user_message`.
"""

from typing import Optional


GENERIC_SCAN_MESSAGE = "Failed to process image text."


class ScanError(RuntimeError):
    """
    Base class for everything the scan pipeline can raise.

    Parameters:
    - message: developer-facing description (goes to the logs)
    - user_message: short text safe to show to the user
    """

    user_message = GENERIC_SCAN_MESSAGE

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        if user_message is not None:
            self.user_message = user_message


class PermissionDenied(ScanError):
    """Camera (or image file) access was refused."""

    user_message = "Camera access is required."


class UserCancelled(ScanError):
    """
    The user backed out of the camera.

    Not a failure: callers return to the previous state without an alert.
    """

    user_message = "Scan cancelled."


class InvalidImageError(ScanError):
    """The captured bytes could not be decoded as an image."""

    user_message = "The captured image could not be read."


class ExtractionServiceError(ScanError):
    """The OCR service call failed, timed out or returned garbage."""


class InterpretationServiceError(ScanError):
    """The chat-completion call failed, timed out or returned garbage."""


class ScanCancelled(ScanError):
    """The scan was cancelled (client went away) while it was running."""

    user_message = "Scan cancelled."


class StoreServiceError(RuntimeError):
    """The remote medication store rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
