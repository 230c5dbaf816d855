# census_core/admissions/validation.py
"""
Field checks run before every census or archive write.

Errors come back as a {field: message} mapping so a form can attach each
one to its input. Nothing here raises on bad input.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, Mapping

from census_core.admissions.constants import CATEGORIES, CODE_STATUSES, GENDERS, LOCATIONS
from census_core.admissions.los import as_date

NAME_PATTERN = re.compile(r"^[A-Z\s.-]+$", re.IGNORECASE)
REGISTRATION_PATTERN = re.compile(r"^[A-Z0-9-]+$", re.IGNORECASE)

NAME_TOO_SHORT = "Name must be at least 3 characters."
NAME_INVALID = "Name should only contain letters."
REGISTRATION_REQUIRED = "MR Number is required."
REGISTRATION_INVALID = "Invalid format."
SELECTION_REQUIRED = "Selection required."
CONSULTANT_REQUIRED = "Consultant required."
ADMISSION_REQUIRED = "Admission date required."
ADMISSION_IN_FUTURE = "Admission cannot be in future."
DISCHARGE_BEFORE_ADMISSION = "Discharge cannot be before admission."
DEATH_DATE_REQUIRED = "Date of death required."
DISCHARGE_ON_ADMIT = "Discharge date cannot be set on admission."
INVALID_DATE = "Invalid date."

SELECTION_DOMAINS = {
    "gender": GENDERS,
    "category": CATEGORIES,
    "location": LOCATIONS,
    "code_status": CODE_STATUSES,
}

TEXT_FIELDS = ("name", "registration_number", "gender", "category", "location", "code_status", "consultant")
DATE_FIELDS = ("admission_date", "discharge_date")
FORM_FIELDS = TEXT_FIELDS + DATE_FIELDS


def _coerce_date(value: Any):
    try:
        return as_date(value)
    except ValueError:
        return value


def normalize_admission(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a normalised copy of the form fields: strings trimmed, name and
    MR number upper-cased, dates parsed. Unknown keys are dropped and the
    input mapping is left untouched.
    """
    out: Dict[str, Any] = {}
    for field in TEXT_FIELDS:
        raw = data.get(field)
        out[field] = "" if raw is None else str(raw).strip()

    out["name"] = out["name"].upper()
    out["registration_number"] = out["registration_number"].upper()

    for field in DATE_FIELDS:
        out[field] = _coerce_date(data.get(field))

    return out


def validate_admission(data: Mapping[str, Any], *, today: date, mortality: bool = False) -> Dict[str, str]:
    errors: Dict[str, str] = {}

    name = data.get("name") or ""
    if len(name) < 3:
        errors["name"] = NAME_TOO_SHORT
    elif not NAME_PATTERN.match(name):
        errors["name"] = NAME_INVALID

    reg = data.get("registration_number") or ""
    if not reg:
        errors["registration_number"] = REGISTRATION_REQUIRED
    elif not REGISTRATION_PATTERN.match(reg):
        errors["registration_number"] = REGISTRATION_INVALID

    for field, domain in SELECTION_DOMAINS.items():
        if data.get(field) not in domain:
            errors[field] = SELECTION_REQUIRED

    if not data.get("consultant"):
        errors["consultant"] = CONSULTANT_REQUIRED

    admitted = data.get("admission_date")
    if not isinstance(admitted, date):
        errors["admission_date"] = ADMISSION_REQUIRED
        admitted = None
    elif admitted > today:
        errors["admission_date"] = ADMISSION_IN_FUTURE

    discharged = data.get("discharge_date")
    if discharged in (None, ""):
        if mortality:
            errors["discharge_date"] = DEATH_DATE_REQUIRED
    elif not isinstance(discharged, date):
        errors["discharge_date"] = INVALID_DATE
    elif admitted is not None and discharged < admitted:
        errors["discharge_date"] = DISCHARGE_BEFORE_ADMISSION

    return errors
