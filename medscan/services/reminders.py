"""
reminders.py

Works out which local notifications the app should schedule for a
user's medications.

- Daily reminder: fires at the saved reminder time, if that is still ahead
- Refill reminder: fires at 10:00 on the refill date, if still ahead.
  "10:00 on the refill date" is device-local, so the device's timezone
  is needed; refill dates are stored in UTC.

Pure functions; delivering the notification is the device's job.
"""

from datetime import datetime, time, timezone, tzinfo
from typing import Iterable, List, Optional

from medscan.schemas.medication import MedicationRecord, Reminder


REFILL_REMINDER_TIME = time(hour=10)


def _aware(value: datetime) -> datetime:
    # Naive timestamps are treated as UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def dose_reminder(record: MedicationRecord, now: datetime) -> Optional[Reminder]:
    if not record.daily_reminder or record.reminder_time is None:
        return None

    fire_at = _aware(record.reminder_time)
    if fire_at <= now:
        return None

    return Reminder(
        medication_id=record.id,
        kind="dose",
        title="Medication Reminder",
        message=f"Time to take {record.name}!",
        fire_at=fire_at
    )


def refill_reminder(
    record: MedicationRecord,
    now: datetime,
    tz: Optional[tzinfo] = None
) -> Optional[Reminder]:
    if not record.refill_reminder or record.refill_date is None:
        return None

    refill_date = _aware(record.refill_date)
    if tz is not None:
        refill_date = refill_date.astimezone(tz)

    fire_at = datetime.combine(refill_date.date(), REFILL_REMINDER_TIME, tzinfo=refill_date.tzinfo)
    if fire_at <= now:
        return None

    return Reminder(
        medication_id=record.id,
        kind="refill",
        title="Refill Reminder",
        message=f"Time to get more {record.name}!",
        fire_at=fire_at
    )


def plan_reminders(
    records: Iterable[MedicationRecord],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> List[Reminder]:
    """
    Upcoming reminders for all records, soonest first.

    Parameters:
    - records: the user's saved medications
    - now: reference time (defaults to the current UTC time)
    - tz: the device's timezone, used for the 10:00 refill reminder
      (defaults to the timezone stored with the refill date)
    """

    now = _aware(now) if now else datetime.now(timezone.utc)

    reminders: List[Reminder] = []
    for record in records:
        for reminder in (dose_reminder(record, now), refill_reminder(record, now, tz)):
            if reminder is not None:
                reminders.append(reminder)

    reminders.sort(key=lambda r: r.fire_at)
    return reminders
