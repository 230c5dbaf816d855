# census_core/common/units.py
from __future__ import annotations

from django.conf import settings
from django.db import models


class ClinicalUnit(models.TextChoices):
    HDU = "HDU", "High Dependency"
    ICU = "ICU", "Intensive Care"
    TRANSPLANT = "TRANSPLANT", "Transplant Bay"
    FOURTH_WARD = "4th-WARD", "Ward"
    WARD5 = "WARD5", "5th Floor Ward"


def enabled_units() -> list[str]:
    """Units this deployment serves (settings.CENSUS_UNITS), defaulting to all."""
    configured = getattr(settings, "CENSUS_UNITS", None)
    if not configured:
        return list(ClinicalUnit.values)
    return [u for u in configured if u in ClinicalUnit.values]


def is_known_unit(value: str | None) -> bool:
    return bool(value) and value in enabled_units()
