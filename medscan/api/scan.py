"""
scan.py (API Route)

Label scanning endpoints for the mobile app.

What this file does:
- POST /scan/label   photo of a label -> MedicationDraft
- POST /scan/parse   already-interpreted text -> MedicationDraft
- GET  /scan/options choices offered by the add-medication form

What this file does NOT do:
- Save anything (the user confirms the draft first, see medications.py)
- Talk to OCR or the language model directly (delegates to the pipeline)

Flow:
App uploads photo -> This API -> LabelScanPipeline -> MedicationDraft -> App form
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from medscan.api.deps import get_pipeline
from medscan.schemas.medication import MedicationOptions
from medscan.schemas.scan import MedicationDraft, ParseRequest, ScanResponse
from medscan.services.cancellation import CancellationToken
from medscan.services.errors import (
    InvalidImageError,
    PermissionDenied,
    ScanCancelled,
    ScanError,
    UserCancelled,
)
from medscan.services.parser import parse_label_fields
from medscan.services.pipeline import LabelScanPipeline

logger = logging.getLogger(__name__)

# Non-standard status used by nginx for "client closed request"
CLIENT_CLOSED_REQUEST = 499

DISCONNECT_POLL_SECONDS = 0.5

router = APIRouter()


async def _cancel_on_disconnect(request: Request, token: CancellationToken) -> None:
    """Cancel the scan if the app goes away before it finishes."""

    while not token.cancelled:
        if await request.is_disconnected():
            logger.info("Client disconnected, cancelling scan")
            token.cancel("Client disconnected")
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@router.post(
    "/label",
    response_model=ScanResponse,
    status_code=status.HTTP_200_OK,
    summary="Scan a medication label",
    description=(
        "Upload a photo of a medication label. The text is read with OCR, "
        "interpreted by a language model and returned as a draft with "
        "name, dosage amount, dosage form and instructions."
    )
)
async def scan_label(
    request: Request,
    file: UploadFile = File(...),
    pipeline: LabelScanPipeline = Depends(get_pipeline)
):
    """
    Label scan endpoint.

    Step-by-step process:
    1. Read the uploaded photo into memory
    2. Run the pipeline in a worker thread with a cancellation token
    3. Cancel the token if the client disconnects
    4. Return the draft (or success=False if the user cancelled)

    Errors:
    - 400 Bad Request: upload is not a readable image
    - 403 Forbidden: image access refused
    - 502 Bad Gateway: OCR or language model failed
    - 499: client went away mid-scan
    """

    image_bytes = await file.read()

    token = CancellationToken()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, token))

    try:
        result = await run_in_threadpool(
            pipeline.scan_image,
            image_bytes,
            file.filename,
            token
        )

    except UserCancelled as error:
        return ScanResponse(success=False, message=error.user_message)

    except PermissionDenied as error:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error.user_message
        )

    except InvalidImageError as error:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error.user_message
        )

    except ScanCancelled as error:
        raise HTTPException(
            status_code=CLIENT_CLOSED_REQUEST,
            detail=error.user_message
        )

    except ScanError as error:
        # OCR or language model failure; one generic message for the user
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=error.user_message
        )

    finally:
        token.cancel("Scan finished")
        watcher.cancel()

    return ScanResponse(
        success=True,
        draft=result.draft,
        message="Label scanned",
        image_reference=result.image_reference
    )


@router.post(
    "/parse",
    response_model=MedicationDraft,
    status_code=status.HTTP_200_OK,
    summary="Parse interpreted label text",
    description="Turn '- Label: value' lines into a MedicationDraft. Never fails."
)
async def parse_label(request: ParseRequest):
    return parse_label_fields(request.raw_text)


@router.get(
    "/options",
    response_model=MedicationOptions,
    summary="Dosage form and frequency choices"
)
async def medication_options():
    return MedicationOptions()
