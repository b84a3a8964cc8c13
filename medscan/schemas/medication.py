"""
medication.py (Schemas)

Pydantic models for saved medication records and reminders.

A record is created from a (possibly scanned, then user-edited) draft
plus the schedule chosen on the add-medication form.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DOSAGE_FORM_OPTIONS = [
    "Tablet",
    "Capsule",
    "Liquid",
    "Injection",
    "Drops",
    "Cream",
    "Other",
]

FREQUENCY_OPTIONS = [
    "Daily",
    "Every 4 hours",
    "Every 8 hours",
    "Every 12 hours",
    "Every second day",
    "Weekly",
    "As Needed",
]

MISSING_FIELDS_MESSAGE = "Please complete all required fields."


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class MedicationRecordCreate(BaseModel):
    """
    Request schema for saving a medication.

    name, dosageAmount and dosageForm are required and must not be blank.
    The option lists above are what the form offers, but free text is
    accepted because scanned drafts can carry any wording.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    dosage_amount: str = Field(..., alias="dosageAmount")
    dosage_form: str = Field(..., alias="dosageForm")
    instructions: str = ""
    frequency: str = ""
    daily_reminder: bool = Field(default=False, alias="dailyReminder")
    reminder_time: Optional[datetime] = Field(default=None, alias="reminderTime")
    refill_reminder: bool = Field(default=False, alias="refillReminder")
    refill_date: Optional[datetime] = Field(default=None, alias="refillDate")

    @field_validator("name", "dosage_amount", "dosage_form")
    @classmethod
    def required_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError(MISSING_FIELDS_MESSAGE)
        return value

    @field_validator("instructions", "frequency")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    def to_document(self, created_at: datetime) -> Dict[str, Any]:
        """
        Build the document stored for this record.

        reminderTime / refillDate are only kept when their toggle is on,
        matching what the form shows.
        """

        return {
            "name": self.name,
            "dosageAmount": self.dosage_amount,
            "dosageForm": self.dosage_form,
            "instructions": self.instructions,
            "frequency": self.frequency,
            "dailyReminder": self.daily_reminder,
            "reminderTime": _iso(self.reminder_time) if self.daily_reminder else None,
            "refillReminder": self.refill_reminder,
            "refillDate": _iso(self.refill_date) if self.refill_reminder else None,
            "createdAt": created_at.isoformat(),
        }


class MedicationRecord(BaseModel):
    """A stored medication as returned by the medication store."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    dosage_amount: str = Field(default="", alias="dosageAmount")
    dosage_form: str = Field(default="", alias="dosageForm")
    instructions: str = ""
    frequency: str = ""
    daily_reminder: bool = Field(default=False, alias="dailyReminder")
    reminder_time: Optional[datetime] = Field(default=None, alias="reminderTime")
    refill_reminder: bool = Field(default=False, alias="refillReminder")
    refill_date: Optional[datetime] = Field(default=None, alias="refillDate")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, value: Any) -> Any:
        # Some stores hand out numeric ids
        return str(value) if isinstance(value, int) else value


class UserProfile(BaseModel):
    """User document; only the first name is used (home screen greeting)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    first_name: str = Field(default="", alias="firstName")


class Reminder(BaseModel):
    """A local notification the mobile app should schedule."""

    medication_id: str = Field(..., alias="medicationId")
    kind: Literal["dose", "refill"]
    title: str
    message: str
    fire_at: datetime = Field(..., alias="fireAt")

    model_config = ConfigDict(populate_by_name=True)


class MedicationOptions(BaseModel):
    """Choices offered by the add-medication form."""

    dosage_forms: List[str] = Field(default_factory=lambda: list(DOSAGE_FORM_OPTIONS), alias="dosageForms")
    frequencies: List[str] = Field(default_factory=lambda: list(FREQUENCY_OPTIONS))

    model_config = ConfigDict(populate_by_name=True)
