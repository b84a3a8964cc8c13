"""
cancellation.py

Cancellation token shared between a scan request and the network stages.

The API cancels the token when the mobile client disconnects. Stages check
it before sending a request and again when the response arrives, so a late
response is dropped instead of being turned into a draft nobody will see.
"""

import threading
from typing import Optional

from medscan.services.errors import ScanCancelled


class CancellationToken:
    """Thread-safe one-shot cancellation flag."""

    def __init__(self):
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "Scan cancelled") -> None:
        # First reason wins
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def raise_if_cancelled(self) -> None:
        """Raise ScanCancelled if cancel() has been called."""
        if self._event.is_set():
            raise ScanCancelled(self._reason or "Scan cancelled")
