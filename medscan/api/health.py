from fastapi import APIRouter, Depends

from medscan.api.deps import get_settings
from medscan.config import ScanSettings

router = APIRouter()


@router.get(
    "",
    status_code=200,
    summary="Health check",
    description="Health check endpoint for the MedScan service"
)
def health_check(settings: ScanSettings = Depends(get_settings)):
    return {
        "status": "ok",
        "scanning_configured": settings.scanning_configured,
        "store_configured": settings.store_configured,
    }
