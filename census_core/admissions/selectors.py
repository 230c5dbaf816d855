# census_core/admissions/selectors.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List
from uuid import UUID

from django.conf import settings
from django.db.models import Count, Q, QuerySet
from django.db.models.functions import ExtractMonth

from census_core.admissions.constants import CONSULTANTS, PatientStatus
from census_core.admissions.los import live_length_of_stay
from census_core.admissions.los import today as local_today
from census_core.admissions.models import CensusRecord, MortalityRecord
from census_core.admissions.serials import parse_live_serial, parse_mortality_serial

CENSUS_SEARCH_FIELDS = (
    "name",
    "registration_number",
    "consultant",
    "code_status",
    "category",
    "location",
    "serial_number",
    "status",
)
MORTALITY_SEARCH_FIELDS = ("name", "registration_number")

SORT_KEYS = ("serial", "los", "name", "admission_date", "discharge_date")
DEFAULT_CENSUS_ORDERING = "-serial"
DEFAULT_MORTALITY_ORDERING = "-discharge_date"

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

EXPORT_COLUMNS = (
    "S.No",
    "Reg No",
    "Patient Name",
    "Gender",
    "Category",
    "Code",
    "Consultant",
    "In-Date",
    "Out-Date",
    "LOS",
)


def census_queryset(*, unit: str) -> QuerySet[CensusRecord]:
    return CensusRecord.objects.filter(unit=unit)


def mortality_queryset(*, unit: str) -> QuerySet[MortalityRecord]:
    return MortalityRecord.objects.filter(unit=unit)


def get_census_record(*, unit: str, record_id: UUID) -> CensusRecord:
    return CensusRecord.objects.get(id=record_id, unit=unit)


def get_mortality_record(*, unit: str, record_id: UUID) -> MortalityRecord:
    return MortalityRecord.objects.get(id=record_id, unit=unit)


def search_tokens(qs: QuerySet, text: str | None, fields: Iterable[str]) -> QuerySet:
    """
    Whitespace-separated tokens; every token has to match at least one field.
    """
    fields = tuple(fields)
    for token in (text or "").split():
        cond = Q()
        for name in fields:
            cond |= Q(**{f"{name}__icontains": token})
        qs = qs.filter(cond)
    return qs


def _value(record, name):
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def sort_records(records: Iterable, ordering: str, *, today: date | None = None, mortality: bool = False) -> List:
    """
    Sort in Python: serials and LOS compare numerically, names without case.
    Rows with no value for a date key always go last.
    """
    descending = ordering.startswith("-")
    key = ordering.lstrip("-")
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown ordering: {ordering}")

    records = list(records)

    if key == "serial":
        parse = parse_mortality_serial if mortality else (lambda v: parse_live_serial(v) or 0)
        return sorted(records, key=lambda r: parse(_value(r, "serial_number")), reverse=descending)

    if key == "los":
        on_date = today or local_today()
        return sorted(records, key=lambda r: live_length_of_stay(r, on_date), reverse=descending)

    if key == "name":
        return sorted(records, key=lambda r: (_value(r, "name") or "").casefold(), reverse=descending)

    dated = [r for r in records if _value(r, key)]
    undated = [r for r in records if not _value(r, key)]
    return sorted(dated, key=lambda r: _value(r, key), reverse=descending) + undated


def census_summary(*, unit: str, year: int | None = None, today: date | None = None) -> Dict[str, Any]:
    """
    Dashboard header figures: live counts plus the year's deaths by month.
    """
    year = year or (today or local_today()).year

    by_status = dict(
        census_queryset(unit=unit)
        .order_by()
        .values_list("status")
        .annotate(n=Count("id"))
    )

    deaths = mortality_queryset(unit=unit).filter(discharge_date__year=year)
    monthly = [0] * 12
    for row in deaths.order_by().annotate(month=ExtractMonth("discharge_date")).values("month").annotate(n=Count("id")):
        monthly[row["month"] - 1] = row["n"]

    return {
        "unit": unit,
        "year": year,
        "active": by_status.get(PatientStatus.ACTIVE, 0),
        "discharged": by_status.get(PatientStatus.DISCHARGED, 0),
        "mortality": sum(monthly),
        "monthly_mortality": [{"month": label, "count": n} for label, n in zip(MONTH_LABELS, monthly)],
    }


def _iso(value) -> str:
    return value.isoformat() if value else ""


def export_rows(records: Iterable, *, today: date | None = None) -> List[Dict[str, Any]]:
    """
    Fixed column projection of the current view, in the order given.
    Formatting into CSV/PDF is left to the client.
    """
    on_date = today or local_today()
    rows = []
    for r in records:
        values = (
            _value(r, "serial_number") or "",
            _value(r, "registration_number") or "",
            _value(r, "name") or "",
            _value(r, "gender") or "",
            _value(r, "category") or "",
            _value(r, "code_status") or "",
            _value(r, "consultant") or "",
            _iso(_value(r, "admission_date")),
            _iso(_value(r, "discharge_date")),
            live_length_of_stay(r, on_date),
        )
        rows.append(dict(zip(EXPORT_COLUMNS, values)))
    return rows


def consultant_suggestions(*, unit: str | None = None) -> List[str]:
    """
    Configured consultant list, followed by any other names already used
    in the unit's live census.
    """
    names = list(getattr(settings, "CENSUS_CONSULTANTS", None) or CONSULTANTS)
    if unit:
        seen = {n.casefold() for n in names}
        used = census_queryset(unit=unit).order_by("consultant").values_list("consultant", flat=True).distinct()
        for name in used:
            if name and name.casefold() not in seen:
                seen.add(name.casefold())
                names.append(name)
    return names
