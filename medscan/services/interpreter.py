"""
interpreter.py

Asks a chat-completion model to pick the medication fields out of raw
label text.

The model is told to answer in exactly four labelled lines. That is a
request, not a guarantee; parser.py copes with whatever comes back.
"""

import logging
from typing import Optional

from openai import OpenAI, OpenAIError, APITimeoutError

from medscan.schemas.scan import InterpretedText
from medscan.services.cancellation import CancellationToken
from medscan.services.errors import InterpretationServiceError

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a medical assistant extracting structured prescription details. Return only the following in this format:

- Medication Name:
- Dosage:
- Dosage Form:
- Instructions:"""


def build_messages(raw_text: str) -> list:
    """System instruction plus the OCR text, verbatim."""

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f"Text:\n{raw_text}"},
    ]


class LabelInterpreterService:
    """
    Turns OCR text into "- Label: value" lines using OpenAI.

    Parameters:
    - api_key: OpenAI API key
    - model: chat model name
    - timeout: seconds before the request is abandoned
    - client: optional pre-built OpenAI client (tests inject a fake)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        timeout: float = 30.0,
        client: Optional[OpenAI] = None
    ):
        logger.info("Initializing label interpreter...")

        self.model = model
        self.timeout = timeout

        # One request per scan: SDK retries are switched off
        self.client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def interpret(
        self,
        raw_text: str,
        cancel_token: Optional[CancellationToken] = None
    ) -> InterpretedText:
        """
        Send the extracted label text to the model.

        Returns:
        - InterpretedText with the model's answer

        Raises:
        - InterpretationServiceError on timeout, API error, or a response
          without message content
        - ScanCancelled if the token is cancelled before or during the call
        """

        if cancel_token:
            cancel_token.raise_if_cancelled()

        logger.info("Sending extracted text to the language model...")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(raw_text),
                timeout=self.timeout
            )
        except APITimeoutError as error:
            raise InterpretationServiceError(
                f"Language model request timed out after {self.timeout}s: {error}"
            )
        except OpenAIError as error:
            raise InterpretationServiceError(f"Language model request failed: {error}")

        if cancel_token:
            cancel_token.raise_if_cancelled()

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as error:
            raise InterpretationServiceError(f"Malformed language model response: {error}")

        if not isinstance(content, str):
            raise InterpretationServiceError("Language model response has no text content")

        logger.debug(f"Structured response:\n{content}")
        return InterpretedText(raw_text=content)
