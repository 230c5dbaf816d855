# census_core/admissions/los.py
"""
Length-of-stay arithmetic.

Both the save-time cache and the live display value go through
length_of_stay_days() so list views never disagree by a day.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


def today() -> date:
    return timezone.localdate()


def as_date(value: Any) -> Optional[date]:
    """
    Truncate to a calendar date. Time of day and UTC offset are dropped,
    the wall-clock date of the value is kept.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        parsed = parse_datetime(value)
        if parsed is not None:
            return parsed.date()
        parsed_date = parse_date(value)
        if parsed_date is not None:
            return parsed_date
    raise ValueError(f"Not a date: {value!r}")


def length_of_stay_days(admission, reference=None) -> int:
    admitted = as_date(admission)
    ref = as_date(reference) if reference is not None else today()
    return max(0, (ref - admitted).days)


def saved_length_of_stay(admission, discharge=None, on_date=None) -> int:
    """Value persisted alongside the record at save time."""
    return length_of_stay_days(admission, discharge if discharge else (on_date or today()))


def _field(record, name):
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def live_length_of_stay(record, on_date=None) -> int:
    admission = _field(record, "admission_date")
    if not admission:
        return 0
    discharge = _field(record, "discharge_date")
    return length_of_stay_days(admission, discharge if discharge else (on_date or today()))
