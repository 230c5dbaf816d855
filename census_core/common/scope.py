# census_core/common/scope.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rest_framework.exceptions import ValidationError

from census_core.common.units import is_known_unit

MISSING_UNIT_MSG = "Missing unit header (X-Unit)."
INVALID_UNIT_MSG = "Unknown clinical unit in X-Unit header."

HDR_UNIT = "X-Unit"


@dataclass(frozen=True)
class UnitScope:
    unit: str


def _get_header(request, name: str) -> Optional[str]:
    """
    request.headers is case-insensitive; fallback to META for pytest/client.
    """
    headers = getattr(request, "headers", None)
    if headers is not None:
        v = headers.get(name)
        if v:
            return v

    meta_key = "HTTP_" + name.upper().replace("-", "_")
    return request.META.get(meta_key)


def read_unit_header(request) -> Optional[str]:
    raw = _get_header(request, HDR_UNIT)
    if raw is None:
        return None
    return raw.strip()


def resolve_scope(request) -> Optional[UnitScope]:
    """
    Returns UnitScope when a known unit is attached or sent.
    Returns None when no unit header is present.
    Raises ValidationError when the header names an unknown unit.
    """
    unit = getattr(request, "unit", None)
    if unit and is_known_unit(unit):
        return UnitScope(unit=unit)

    raw = read_unit_header(request)
    if not raw:
        return None

    if not is_known_unit(raw):
        raise ValidationError({"detail": INVALID_UNIT_MSG})

    return UnitScope(unit=raw)


def require_scope(request) -> UnitScope:
    """
    Like resolve_scope() but a missing header is a 400 as well.
    Attaches request.unit / request.scope for downstream consistency.
    """
    scope = resolve_scope(request)
    if scope is None:
        raise ValidationError({"detail": MISSING_UNIT_MSG})

    request.unit = scope.unit
    request.scope = scope
    return scope
