"""
config.py

Central place to load environment variables.

Values are read once into a ScanSettings object. The app passes that
object to the pipeline and the store client; services never read the
environment themselves.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load variables from .env file into environment
load_dotenv()


DEFAULT_VISION_API_URL = "https://vision.googleapis.com/v1/images:annotate"
DEFAULT_OPENAI_MODEL = "gpt-4o"


class ScanSettings(BaseModel):
    """
    Settings for the label scan service.

    API keys default to None so the app can start without them; the
    routes report "not configured" when a key is missing.
    """

    google_vision_api_key: Optional[str] = None
    vision_api_url: str = DEFAULT_VISION_API_URL
    ocr_timeout_seconds: float = Field(default=20.0, gt=0)

    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    llm_timeout_seconds: float = Field(default=30.0, gt=0)

    medication_store_url: Optional[str] = None
    store_timeout_seconds: float = Field(default=10.0, gt=0)

    log_level: str = "INFO"

    @property
    def scanning_configured(self) -> bool:
        return bool(self.google_vision_api_key and self.openai_api_key)

    @property
    def store_configured(self) -> bool:
        return bool(self.medication_store_url)


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        number = float(value)
    except ValueError:
        number = None

    # Timeouts must be positive
    if number is None or not number > 0:
        logging.getLogger(__name__).warning(
            f"Ignoring invalid {name}={value!r}, using {default}"
        )
        return default
    return number


def load_settings() -> ScanSettings:
    """
    Build ScanSettings from environment variables (and .env).

    Called by:
    - create_app() in medscan/main.py
    """

    return ScanSettings(
        google_vision_api_key=os.getenv("GOOGLE_CLOUD_VISION_API_KEY") or None,
        vision_api_url=os.getenv("VISION_API_URL") or DEFAULT_VISION_API_URL,
        ocr_timeout_seconds=_float_env("OCR_TIMEOUT_SECONDS", 20.0),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        llm_timeout_seconds=_float_env("LLM_TIMEOUT_SECONDS", 30.0),
        medication_store_url=os.getenv("MEDICATION_STORE_URL") or None,
        store_timeout_seconds=_float_env("STORE_TIMEOUT_SECONDS", 10.0),
        log_level=os.getenv("LOG_LEVEL") or "INFO",
    )


def configure_logging(level: str = "INFO") -> None:
    """Console logging for the service (uvicorn keeps its own handlers)."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
