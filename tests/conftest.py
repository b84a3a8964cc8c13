import base64
import io
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

from medscan.config import ScanSettings


AMOXICILLIN_REPLY = """- Medication Name: Amoxicillin
- Dosage: 500 mg
- Dosage Form: Capsule
- Instructions: Take twice daily with food"""


def make_png(size=(8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(255, 255, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


def http_response(status_code=200, body=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    response.content = b"{}" if body is not None else b""
    response.text = str(body)
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


def vision_body(text):
    annotation = {"fullTextAnnotation": {"text": text}} if text is not None else {}
    return {"responses": [annotation]}


def chat_response(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def png_base64(png_bytes):
    return base64.b64encode(png_bytes).decode("utf-8")


@pytest.fixture
def settings():
    return ScanSettings(
        google_vision_api_key="vision-key",
        vision_api_url="https://vision.test/v1/images:annotate",
        ocr_timeout_seconds=15,
        openai_api_key="openai-key",
        openai_model="gpt-4o",
        llm_timeout_seconds=25,
        medication_store_url="https://store.test/api",
    )


@pytest.fixture
def vision_session():
    session = MagicMock(spec=requests.Session)
    session.post.return_value = http_response(body=vision_body("AMOXICILLIN 500MG CAPSULES"))
    return session


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create.return_value = chat_response(AMOXICILLIN_REPLY)
    return client
