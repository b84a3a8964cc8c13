"""
capture.py

Image capture: the first stage of a label scan.

On the phone this is the camera. On the service side an image arrives
either as an upload from the app or as a file on disk (scripts, tests).
Both go through the same ImageCapture.capture() flow:

1. Ask for permission   -> PermissionDenied if refused
2. Take the picture     -> UserCancelled if nothing was taken
3. Check it is an image -> InvalidImageError if Pillow cannot read it
4. Return a ScanRequest with the image base64-encoded

Nothing is saved anywhere.
"""

import base64
import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from medscan.schemas.scan import ScanRequest
from medscan.services.errors import InvalidImageError, PermissionDenied, UserCancelled

logger = logging.getLogger(__name__)


@dataclass
class CapturedImage:
    """Raw bytes from the camera plus where they came from."""

    data: bytes
    reference: Optional[str] = None


class ImageCapture(ABC):
    """
    Base class for image sources.

    Subclasses only answer two questions: may we use the source, and
    what did it produce. capture() does the rest.
    """

    @abstractmethod
    def request_permission(self) -> bool:
        """Return False if access to the image source is refused."""

    @abstractmethod
    def take_picture(self) -> Optional[CapturedImage]:
        """Return the captured image, or None if the user cancelled."""

    def capture(self) -> ScanRequest:
        logger.info("Starting image capture...")

        if not self.request_permission():
            logger.info("Camera permission denied.")
            raise PermissionDenied("Camera access was not granted")

        captured = self.take_picture()
        if captured is None or not captured.data:
            logger.info("Image capture canceled.")
            raise UserCancelled("No image was captured")

        image_format = _detect_format(captured.data)

        logger.info(f"Image captured ({len(captured.data)} bytes, {image_format})")

        return ScanRequest(
            image_base64=base64.b64encode(captured.data).decode("utf-8"),
            image_reference=captured.reference,
            image_format=image_format,
        )


def _detect_format(data: bytes) -> str:
    """Verify the bytes decode as an image and return its format."""

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.verify()
            return (image.format or "unknown").lower()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as error:
        raise InvalidImageError(f"Captured bytes are not a readable image: {error}")


class UploadedImageCapture(ImageCapture):
    """
    An image the mobile app already took and uploaded.

    Permission was handled on the device, so it is always granted here.
    An empty upload means the user backed out of the camera.
    """

    def __init__(self, data: bytes, filename: Optional[str] = None):
        self.data = data
        self.filename = filename

    def request_permission(self) -> bool:
        return True

    def take_picture(self) -> Optional[CapturedImage]:
        if not self.data:
            return None
        return CapturedImage(data=self.data, reference=self.filename)


class FileImageCapture(ImageCapture):
    """Reads a label photo from a local file."""

    def __init__(self, path: str):
        self.path = Path(path)

    def request_permission(self) -> bool:
        try:
            with self.path.open("rb"):
                return True
        except PermissionError:
            return False
        except FileNotFoundError:
            # Reported as a cancelled capture in take_picture()
            return True

    def take_picture(self) -> Optional[CapturedImage]:
        if not self.path.is_file():
            return None
        return CapturedImage(data=self.path.read_bytes(), reference=str(self.path))
