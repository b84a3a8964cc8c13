"""
pipeline.py

The label scan pipeline: photo in, MedicationDraft out.

    capture -> OCR -> language model -> field parsing

Stages run one after another, each needing the previous stage's output.
If any stage fails the whole scan fails with that stage's error; no
draft is built from partial results and nothing is retried. The user
simply scans again.
"""

import logging
import time
from typing import Optional

from medscan.config import ScanSettings
from medscan.schemas.scan import MedicationDraft, ScanRequest, ScanResult
from medscan.services.cancellation import CancellationToken
from medscan.services.capture import ImageCapture, UploadedImageCapture
from medscan.services.errors import ScanCancelled, ScanError
from medscan.services.interpreter import LabelInterpreterService
from medscan.services.ocr import OCRService
from medscan.services.parser import parse_label_fields

logger = logging.getLogger(__name__)


class LabelScanPipeline:
    """
    Runs a label scan end to end.

    Settings are passed in explicitly. The OCR and interpreter services
    are built from them unless the caller supplies its own (tests do).

    Usage:
        pipeline = LabelScanPipeline(settings)
        result = pipeline.scan_label(UploadedImageCapture(data, "label.jpg"))
        result.draft.name
    """

    def __init__(
        self,
        settings: ScanSettings,
        ocr_service: Optional[OCRService] = None,
        interpreter: Optional[LabelInterpreterService] = None
    ):
        self.settings = settings

        self.ocr_service = ocr_service or OCRService(
            api_key=settings.google_vision_api_key,
            api_url=settings.vision_api_url,
            timeout=settings.ocr_timeout_seconds
        )

        self.interpreter = interpreter or LabelInterpreterService(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.llm_timeout_seconds
        )

    def scan_label(
        self,
        capture: ImageCapture,
        cancel_token: Optional[CancellationToken] = None
    ) -> ScanResult:
        """
        Capture an image and turn it into a MedicationDraft.

        Raises whatever the failing stage raised:
        - PermissionDenied / UserCancelled / InvalidImageError (capture)
        - ExtractionServiceError (OCR)
        - InterpretationServiceError (language model)
        - ScanCancelled (token cancelled mid-scan)
        """

        request = capture.capture()
        draft = self.analyze(request, cancel_token=cancel_token)

        return ScanResult(
            draft=draft,
            captured_at=request.captured_at,
            image_reference=request.image_reference
        )

    def scan_image(
        self,
        image_bytes: bytes,
        filename: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> ScanResult:
        """Shortcut for an image the app already captured and uploaded."""

        return self.scan_label(
            UploadedImageCapture(image_bytes, filename),
            cancel_token=cancel_token
        )

    def analyze(
        self,
        request: ScanRequest,
        cancel_token: Optional[CancellationToken] = None
    ) -> MedicationDraft:
        """
        Run OCR, interpretation and parsing on a captured image.

        Called by:
        - scan_label()
        """

        start = time.monotonic()
        logger.info("Starting image analysis...")

        try:
            extracted = self.ocr_service.extract_text(
                request.image_base64,
                cancel_token=cancel_token
            )
            interpreted = self.interpreter.interpret(
                extracted.raw_text,
                cancel_token=cancel_token
            )
        except ScanCancelled:
            logger.info("Scan cancelled before analysis finished")
            raise
        except ScanError as error:
            logger.error(f"Error during OCR or AI analysis: {error}")
            raise

        draft = parse_label_fields(interpreted.raw_text)

        elapsed_ms = (time.monotonic() - start) * 1000
        logger.info(
            f"Label analysed in {elapsed_ms:.0f}ms "
            f"(name found: {bool(draft.name)}, empty draft: {draft.is_empty})"
        )

        return draft
