"""
medications.py (API Route)

Saved medications, the user profile and the reminder plan.

All calls act as the signed-in user: the app's Authorization header is
forwarded to the medication store (see deps.get_store_client).

Endpoints:
- POST   /users/{user_id}/medications
- GET    /users/{user_id}/medications
- DELETE /users/{user_id}/medications/{medication_id}
- GET    /users/{user_id}/profile
- GET    /users/{user_id}/reminders?tz=Area/City
"""

import logging
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from medscan.api.deps import get_store_client
from medscan.schemas.medication import (
    MedicationRecord,
    MedicationRecordCreate,
    Reminder,
    UserProfile,
)
from medscan.services.backend_client import MedicationStoreClient
from medscan.services.errors import StoreServiceError
from medscan.services.reminders import plan_reminders

logger = logging.getLogger(__name__)

router = APIRouter()


def _store_error(error: StoreServiceError, action: str) -> HTTPException:
    """Map a store failure to an HTTP error for the app."""

    logger.error(f"Error {action}: {error}")

    # Pass through what the store said about the request itself
    if error.status_code in (401, 403, 404):
        return HTTPException(status_code=error.status_code, detail=str(error))

    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Failed {action}. Try again."
    )


@router.post(
    "/{user_id}/medications",
    response_model=MedicationRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Save a medication",
    description=(
        "Save a confirmed medication. name, dosageAmount and dosageForm "
        "are required; reminder time and refill date are only stored when "
        "their reminder is switched on."
    )
)
def add_medication(
    user_id: str,
    record: MedicationRecordCreate,
    store: MedicationStoreClient = Depends(get_store_client)
):
    try:
        return store.create_medication(user_id, record)
    except StoreServiceError as error:
        raise _store_error(error, "saving medication")


@router.get(
    "/{user_id}/medications",
    response_model=List[MedicationRecord],
    summary="List medications, newest first"
)
def list_medications(
    user_id: str,
    store: MedicationStoreClient = Depends(get_store_client)
):
    try:
        return store.list_medications(user_id)
    except StoreServiceError as error:
        raise _store_error(error, "fetching medications")


@router.delete(
    "/{user_id}/medications/{medication_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a medication"
)
def delete_medication(
    user_id: str,
    medication_id: str,
    store: MedicationStoreClient = Depends(get_store_client)
):
    try:
        store.delete_medication(user_id, medication_id)
    except StoreServiceError as error:
        raise _store_error(error, "deleting medication")

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{user_id}/profile",
    response_model=UserProfile,
    summary="User profile (first name for the greeting)"
)
def user_profile(
    user_id: str,
    store: MedicationStoreClient = Depends(get_store_client)
):
    try:
        return store.get_user_profile(user_id)
    except StoreServiceError as error:
        raise _store_error(error, "fetching profile")


@router.get(
    "/{user_id}/reminders",
    response_model=List[Reminder],
    summary="Upcoming reminders to schedule on the device"
)
def upcoming_reminders(
    user_id: str,
    tz: str = Query(default="UTC", description="Device timezone (IANA name, e.g. Europe/Oslo)"),
    store: MedicationStoreClient = Depends(get_store_client)
):
    try:
        device_tz = ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown timezone: {tz}"
        )

    try:
        records = store.list_medications(user_id)
    except StoreServiceError as error:
        raise _store_error(error, "fetching medications")

    return plan_reminders(records, tz=device_tz)
