"""
scan.py (Schemas)

Data structures passed between the label scan stages, plus the
request/response bodies of the /scan endpoints.

Only MedicationDraft leaves the pipeline. ScanRequest, ExtractedText and
InterpretedText live for one scan and are then thrown away.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanRequest(BaseModel):
    """
    One captured label photo, ready to send to OCR.

    image_base64 is what goes over the wire; image_reference lets the
    caller show the photo again (filename or device URI).
    """

    image_base64: str = Field(..., min_length=1)
    captured_at: datetime = Field(default_factory=_utcnow)
    image_reference: Optional[str] = None
    image_format: Optional[str] = None


class ExtractedText(BaseModel):
    """OCR output. "No text found." is a normal value, not an error."""

    raw_text: str = ""


class InterpretedText(BaseModel):
    """Chat-completion output, expected as "- Label: value" lines."""

    raw_text: str = ""


class MedicationDraft(BaseModel):
    """
    MedicationDraft

    Pre-filled form values produced from a label scan. Fields the scan
    could not find are empty strings, never missing. The user edits and
    confirms the draft before anything is saved.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(
        default="",
        description="Medication name as printed on the label",
        examples=["Amoxicillin"],
    )
    dosage_amount: str = Field(
        default="",
        alias="dosageAmount",
        description="Strength per dose",
        examples=["500 mg"],
    )
    dosage_form: str = Field(
        default="",
        alias="dosageForm",
        description="Tablet, Capsule, Liquid, ...",
        examples=["Capsule"],
    )
    instructions: str = Field(
        default="",
        description="Directions from the label",
        examples=["Take twice daily with food"],
    )

    @property
    def is_empty(self) -> bool:
        return not any((self.name, self.dosage_amount, self.dosage_form, self.instructions))


class ScanResult(BaseModel):
    """What scan_label() returns: the draft and the photo it came from."""

    draft: MedicationDraft
    captured_at: datetime
    image_reference: Optional[str] = None


class ParseRequest(BaseModel):
    """Body of POST /scan/parse."""

    raw_text: str = Field(
        ...,
        description="Interpreted label text in '- Label: value' lines",
        examples=["- Medication Name: Amoxicillin\n- Dosage: 500 mg"],
    )


class ScanResponse(BaseModel):
    """
    Response of POST /scan/label.

    success is False only when the user cancelled; real failures are
    returned as HTTP errors.
    """

    success: bool = Field(..., description="Whether a draft was produced")
    draft: Optional[MedicationDraft] = None
    message: str = ""
    image_reference: Optional[str] = None
