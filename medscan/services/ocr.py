"""
ocr.py

Reads the text printed on a medication label.

Sends the captured image to the Google Cloud Vision "images:annotate"
endpoint with TEXT_DETECTION and returns the full text annotation.

This file:
- Only returns extracted text
- Does NOT interpret the text (see interpreter.py)
- Does NOT save images anywhere
- Does NOT retry: one request per scan
"""

import logging
from typing import Any, Dict, Optional

import requests

from medscan.schemas.scan import ExtractedText
from medscan.services.cancellation import CancellationToken
from medscan.services.errors import ExtractionServiceError

logger = logging.getLogger(__name__)


NO_TEXT_FOUND = "No text found."


class OCRService:
    """
    OCRService is responsible for one job only:
    sending a label photo to the OCR service and returning its text.

    Parameters:
    - api_key: Google Cloud Vision API key
    - api_url: annotate endpoint (overridable for tests/proxies)
    - timeout: seconds before the request is abandoned
    - session: optional requests.Session to reuse connections
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def extract_text(
        self,
        image_base64: str,
        cancel_token: Optional[CancellationToken] = None
    ) -> ExtractedText:
        """
        Extract all text from a base64-encoded image.

        What happens here:
        1. Build the annotate request (one image, TEXT_DETECTION)
        2. POST it with a bounded timeout
        3. Read responses[0].fullTextAnnotation.text
        4. Fall back to "No text found." when there is no annotation

        Returns:
        - ExtractedText

        Raises:
        - ExtractionServiceError on timeout, transport failure, non-2xx
          status or a body that is not an annotate response
        - ScanCancelled if the token is cancelled before or during the call
        """

        if cancel_token:
            cancel_token.raise_if_cancelled()

        payload = {
            "requests": [
                {
                    "image": {"content": image_base64},
                    "features": [{"type": "TEXT_DETECTION"}],
                }
            ]
        }

        logger.info("Sending image to OCR service...")

        try:
            response = self.session.post(
                self.api_url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout
            )
        except requests.Timeout as error:
            raise ExtractionServiceError(
                f"OCR request timed out after {self.timeout}s: {error}"
            )
        except requests.RequestException as error:
            raise ExtractionServiceError(f"OCR request failed: {error}")

        # A response that arrives after cancellation is dropped
        if cancel_token:
            cancel_token.raise_if_cancelled()

        if not 200 <= response.status_code < 300:
            raise ExtractionServiceError(
                f"OCR service returned HTTP {response.status_code}"
            )

        try:
            body = response.json()
        except ValueError as error:
            raise ExtractionServiceError(f"OCR response is not JSON: {error}")

        text = self._read_full_text(body)

        if not text:
            logger.info("OCR found no text on the image")
            return ExtractedText(raw_text=NO_TEXT_FOUND)

        logger.info(f"Extracted {len(text)} characters from image")
        return ExtractedText(raw_text=text)

    @staticmethod
    def _read_full_text(body: Any) -> Optional[str]:
        """
        Pull responses[0].fullTextAnnotation.text out of the body.

        Missing annotation is fine (returns None). A body that is not an
        annotate response at all, or that carries an error, is not.
        """

        if not isinstance(body, dict) or not isinstance(body.get("responses"), list):
            raise ExtractionServiceError("OCR response has no 'responses' list")

        responses = body["responses"]
        if not responses:
            return None

        first: Dict[str, Any] = responses[0] if isinstance(responses[0], dict) else {}

        if first.get("error"):
            message = first["error"].get("message", "unknown error") if isinstance(first["error"], dict) else first["error"]
            raise ExtractionServiceError(f"OCR service reported an error: {message}")

        annotation = first.get("fullTextAnnotation") or {}
        if not isinstance(annotation, dict):
            return None

        text = annotation.get("text")
        return text if isinstance(text, str) and text.strip() else None
