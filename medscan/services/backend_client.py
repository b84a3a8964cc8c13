"""
backend_client.py

This module is responsible for communicating with the medication store.
The scan service NEVER talks to the database directly.
All record operations go through this client.

Responsibilities:
- Handle authentication headers (bearer access token)
- Send requests to the store's REST endpoints
- Retry on temporary failures
- Handle timeouts and store errors safely

Store layout:
- /users/{user_id}/                      user profile document
- /users/{user_id}/medications/          medication collection
- /users/{user_id}/medications/{id}/     one medication
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import requests
from pydantic import BaseModel, ValidationError

from medscan.schemas.medication import MedicationRecord, MedicationRecordCreate, UserProfile
from medscan.services.errors import StoreServiceError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class MedicationStoreClient:
    """
    MedicationStoreClient is a thin and safe wrapper over the store REST API.

    This class:
    - Attaches Authorization headers
    - Sends JSON requests
    - Retries requests on network/server failure
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        timeout: float = 10,
        max_retries: int = 3,
        retry_delay: float = 1.5,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize store client.

        Parameters:
        - base_url: Store API base URL
        - access_token: access token for Authorization
        - timeout: Request timeout in seconds
        - max_retries: Number of attempts on failure
        - retry_delay: Delay (seconds) between retries
        """

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()

        # Authorization header used for all requests
        self.headers = {
            "Authorization": f"Bearer {access_token}"
        }

    # ------------------------------------------------------------------
    # Internal request handler with retry logic
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Internal method to send HTTP requests with retry support.

        Parameters:
        - method: HTTP method (GET, POST, DELETE)
        - endpoint: API endpoint path
        - json: request body

        Returns:
        - Parsed JSON response ({} for empty bodies)

        Raises:
        - StoreServiceError on a 4xx response (not retried)
        - StoreServiceError once all retries are used up
        """

        url = f"{self.base_url}{endpoint}"

        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    headers=self.headers,
                    json=json,
                    timeout=self.timeout
                )
            except requests.RequestException as error:
                last_error = error
                logger.warning(f"Store request {method} {endpoint} failed (attempt {attempt}): {error}")
            else:
                # Success response
                if 200 <= response.status_code < 300:
                    if not response.content:
                        return {}
                    try:
                        return response.json()
                    except ValueError as error:
                        raise StoreServiceError(f"Store returned a non-JSON body: {error}")

                # Client errors (do not retry)
                if 400 <= response.status_code < 500:
                    raise StoreServiceError(
                        f"Store rejected request ({response.status_code}): {response.text}",
                        status_code=response.status_code
                    )

                # Server errors (retry)
                last_error = StoreServiceError(
                    f"Store server error ({response.status_code})",
                    status_code=response.status_code
                )
                logger.warning(f"Store request {method} {endpoint} got {response.status_code} (attempt {attempt})")

            # Retry if attempts remain
            if attempt < self.max_retries:
                time.sleep(self.retry_delay)

        # All retries exhausted
        status_code = getattr(last_error, "status_code", None)
        raise StoreServiceError(
            f"Store request failed after {self.max_retries} attempts: {last_error}",
            status_code=status_code
        )

    @staticmethod
    def _medications_path(user_id: str) -> str:
        return f"/users/{quote(user_id, safe='')}/medications/"

    # ------------------------------------------------------------------
    # Public API methods
    # ------------------------------------------------------------------

    def create_medication(
        self,
        user_id: str,
        record: MedicationRecordCreate,
        created_at: Optional[datetime] = None
    ) -> MedicationRecord:
        """
        Save a confirmed medication for a user.

        Returns:
        - the stored record, including the id the store assigned
        """

        document = record.to_document(created_at or datetime.now(timezone.utc))

        body = self._request(
            method="POST",
            endpoint=self._medications_path(user_id),
            json=document
        )

        logger.info(f"Medication saved for user {user_id}")

        # Stores may echo the whole document or only the new id
        if not isinstance(body, dict) or not body.get("id"):
            raise StoreServiceError("Store did not return an id for the new medication")

        return _build(MedicationRecord, {**document, **body}, "medication")

    def list_medications(self, user_id: str) -> List[MedicationRecord]:
        """
        Fetch a user's medications, newest first.
        Used by the home screen and the reminder plan.
        """

        body = self._request(
            method="GET",
            endpoint=self._medications_path(user_id)
        )

        items = (body.get("medications") or []) if isinstance(body, dict) else body
        if not isinstance(items, list):
            raise StoreServiceError("Store returned medications in an unexpected shape")

        records = [_build(MedicationRecord, item, "medication") for item in items]

        records.sort(key=_created_at_key, reverse=True)
        return records

    def delete_medication(self, user_id: str, medication_id: str) -> None:
        """Delete one medication."""

        self._request(
            method="DELETE",
            endpoint=f"{self._medications_path(user_id)}{quote(medication_id, safe='')}/"
        )
        logger.info(f"Medication {medication_id} deleted for user {user_id}")

    def get_user_profile(self, user_id: str) -> UserProfile:
        """Fetch the user document (first name for the greeting)."""

        body = self._request(
            method="GET",
            endpoint=f"/users/{quote(user_id, safe='')}/"
        )
        if not isinstance(body, dict):
            raise StoreServiceError("Store returned a profile that is not an object")

        return _build(UserProfile, {"id": user_id, **body}, "profile")


def _build(model: Type[ModelT], data: Any, what: str) -> ModelT:
    if not isinstance(data, dict):
        raise StoreServiceError(f"Store returned a {what} that is not an object")
    try:
        return model(**data)
    except ValidationError as error:
        logger.warning(f"Invalid {what} from store: {error}")
        raise StoreServiceError(f"Store returned an invalid {what}")


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _created_at_key(record: MedicationRecord) -> datetime:
    # Records without createdAt sort last; naive timestamps count as UTC
    if record.created_at is None:
        return _OLDEST
    if record.created_at.tzinfo is None:
        return record.created_at.replace(tzinfo=timezone.utc)
    return record.created_at
