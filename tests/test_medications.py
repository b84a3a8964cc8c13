from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from medscan.schemas.medication import (
    DOSAGE_FORM_OPTIONS,
    FREQUENCY_OPTIONS,
    MISSING_FIELDS_MESSAGE,
    MedicationRecord,
    MedicationRecordCreate,
)
from medscan.services.reminders import plan_reminders

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def record(**overrides):
    data = {
        "id": "med-1",
        "name": "Amoxicillin",
        "dosageAmount": "500 mg",
        "dosageForm": "Capsule",
    }
    data.update(overrides)
    return MedicationRecord(**data)


def test_create_requires_name_dosage_and_form():
    with pytest.raises(ValidationError) as info:
        MedicationRecordCreate(name="  ", dosageAmount="", dosageForm="Tablet")

    errors = info.value.errors()
    assert {e["loc"][0] for e in errors} == {"name", "dosageAmount"}
    assert all(MISSING_FIELDS_MESSAGE in e["msg"] for e in errors)


def test_create_accepts_draft_field_names():
    create = MedicationRecordCreate(name="Amoxicillin", dosage_amount="500 mg", dosage_form="Capsule")

    assert create.dosage_amount == "500 mg"
    assert create.instructions == ""


def test_document_drops_times_when_reminders_off():
    create = MedicationRecordCreate(
        name="Amoxicillin",
        dosageAmount="500 mg",
        dosageForm="Capsule",
        frequency="Every 8 hours",
        dailyReminder=False,
        reminderTime=NOW,
        refillReminder=False,
        refillDate=NOW,
    )

    document = create.to_document(NOW)

    assert document["reminderTime"] is None
    assert document["refillDate"] is None
    assert document["createdAt"] == NOW.isoformat()
    assert document["frequency"] == "Every 8 hours"


def test_document_keeps_times_when_reminders_on():
    create = MedicationRecordCreate(
        name="Amoxicillin",
        dosageAmount="500 mg",
        dosageForm="Capsule",
        dailyReminder=True,
        reminderTime=NOW,
        refillReminder=True,
        refillDate=NOW + timedelta(days=10),
    )

    document = create.to_document(NOW)

    assert set(document) == {
        "name", "dosageAmount", "dosageForm", "instructions", "frequency",
        "dailyReminder", "reminderTime", "refillReminder", "refillDate", "createdAt",
    }
    assert document["reminderTime"] == NOW.isoformat()
    assert document["refillDate"] == (NOW + timedelta(days=10)).isoformat()


def test_form_options():
    assert "Capsule" in DOSAGE_FORM_OPTIONS
    assert DOSAGE_FORM_OPTIONS[-1] == "Other"
    assert FREQUENCY_OPTIONS[0] == "Daily"
    assert "As Needed" in FREQUENCY_OPTIONS


def test_numeric_store_id_becomes_string():
    assert record(id=42).id == "42"


def test_dose_reminder_only_when_in_future():
    upcoming = record(dailyReminder=True, reminderTime=NOW + timedelta(hours=2))
    passed = record(id="med-2", dailyReminder=True, reminderTime=NOW - timedelta(hours=2))
    switched_off = record(id="med-3", dailyReminder=False, reminderTime=NOW + timedelta(hours=1))

    reminders = plan_reminders([upcoming, passed, switched_off], now=NOW)

    assert len(reminders) == 1
    assert reminders[0].kind == "dose"
    assert reminders[0].title == "Medication Reminder"
    assert reminders[0].message == "Time to take Amoxicillin!"
    assert reminders[0].fire_at == NOW + timedelta(hours=2)


def test_refill_reminder_fires_at_ten():
    refill = record(refillReminder=True, refillDate=datetime(2026, 3, 5, 18, 30, tzinfo=timezone.utc))

    reminders = plan_reminders([refill], now=NOW)

    assert len(reminders) == 1
    assert reminders[0].kind == "refill"
    assert reminders[0].message == "Time to get more Amoxicillin!"
    assert reminders[0].fire_at == datetime(2026, 3, 5, 10, 0, tzinfo=timezone.utc)


def test_refill_today_after_ten_is_skipped():
    refill = record(refillReminder=True, refillDate=datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc))

    assert plan_reminders([refill], now=NOW.replace(hour=11)) == []


def test_reminders_sorted_soonest_first():
    late = record(id="a", dailyReminder=True, reminderTime=NOW + timedelta(days=1))
    soon = record(id="b", dailyReminder=True, reminderTime=NOW + timedelta(minutes=5))

    reminders = plan_reminders([late, soon], now=NOW)

    assert [r.medication_id for r in reminders] == ["b", "a"]


def test_naive_times_are_treated_as_utc():
    naive = record(dailyReminder=True, reminderTime=datetime(2026, 3, 2, 12, 0))

    reminders = plan_reminders([naive], now=NOW)

    assert reminders[0].fire_at == datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def test_refill_reminder_uses_device_timezone():
    brisbane = ZoneInfo("Australia/Brisbane")
    # Saved by the app as 2 Nov 08:00 Brisbane time, stored in UTC
    refill = record(refillReminder=True, refillDate=datetime(2026, 11, 1, 22, 0, tzinfo=timezone.utc))

    reminders = plan_reminders([refill], now=NOW, tz=brisbane)

    assert reminders[0].fire_at == datetime(2026, 11, 2, 10, 0, tzinfo=brisbane)
    assert reminders[0].fire_at == datetime(2026, 11, 2, 0, 0, tzinfo=timezone.utc)


def test_refill_reminder_keeps_wall_clock_across_dst():
    oslo = ZoneInfo("Europe/Oslo")
    refill = record(refillReminder=True, refillDate=datetime(2026, 7, 1, 6, 0, tzinfo=timezone.utc))

    reminders = plan_reminders([refill], now=NOW, tz=oslo)

    assert reminders[0].fire_at.astimezone(oslo).hour == 10
    assert reminders[0].fire_at.utcoffset() == timedelta(hours=2)
