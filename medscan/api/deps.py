"""
deps.py

FastAPI dependencies shared by the routers.

Settings live on app.state (set in create_app). The pipeline is built
once, on first use, so the app still starts when API keys are missing.
"""

from fastapi import Header, HTTPException, Request, status

from medscan.config import ScanSettings
from medscan.services.backend_client import MedicationStoreClient
from medscan.services.pipeline import LabelScanPipeline


def get_settings(request: Request) -> ScanSettings:
    return request.app.state.settings


def get_pipeline(request: Request) -> LabelScanPipeline:
    """Return the shared pipeline, building it on first use."""

    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is not None:
        return pipeline

    settings = get_settings(request)
    if not settings.scanning_configured:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Label scanning service not configured"
        )

    pipeline = LabelScanPipeline(settings)
    request.app.state.pipeline = pipeline
    return pipeline


def get_store_client(
    request: Request,
    authorization: str = Header(default="")
) -> MedicationStoreClient:
    """
    Store client acting as the calling user.

    The app's own bearer token is forwarded to the store, which decides
    what the user may read or write.
    """

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing"
        )

    settings = get_settings(request)
    if not settings.store_configured:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Medication store not configured"
        )

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bearer token required"
        )

    return MedicationStoreClient(
        base_url=settings.medication_store_url,
        access_token=token.strip(),
        timeout=settings.store_timeout_seconds
    )
