# census_core/admissions/serials.py
"""
Per-unit display serials, derived from whatever snapshot the caller holds.

There is no server-side counter: two writers holding the same stale
snapshot will allocate the same serial.
"""
from __future__ import annotations

import re
from typing import Iterable, Optional

LIVE_FORMAT = "%03d"
MORTALITY_FORMAT = "M-%03d"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_FIRST_DIGITS = re.compile(r"\d+")


def _serial_of(record) -> Optional[str]:
    if isinstance(record, dict):
        value = record.get("serial_number")
    elif isinstance(record, str):
        value = record
    else:
        value = getattr(record, "serial_number", None)
    return None if value is None else str(value)


def parse_live_serial(value: Optional[str]) -> Optional[int]:
    """
    Lenient base-10 parse of the leading digits ("012" -> 12, "7b" -> 7).
    Missing counts as 0; unparseable returns None.
    """
    if value is None or value == "":
        return 0
    match = _LEADING_INT.match(value)
    if not match:
        return None
    return int(match.group(1))


def parse_mortality_serial(value: Optional[str]) -> int:
    """First run of digits ("M-007" -> 7, "012" -> 12); none counts as 0."""
    if not value:
        return 0
    match = _FIRST_DIGITS.search(value)
    return int(match.group(0)) if match else 0


def next_serial(records: Iterable) -> str:
    highest = 0
    for record in records:
        n = parse_live_serial(_serial_of(record))
        if n is not None and n > highest:
            highest = n
    return LIVE_FORMAT % (highest + 1)


def next_mortality_serial(records: Iterable) -> str:
    highest = 0
    for record in records:
        n = parse_mortality_serial(_serial_of(record))
        if n > highest:
            highest = n
    return MORTALITY_FORMAT % (highest + 1)
