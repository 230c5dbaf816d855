# census_core/common/models.py
from __future__ import annotations

import uuid

from django.db import models

from census_core.common.units import ClinicalUnit


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UnitScopedModel(TimeStampedModel):
    """
    Scopes a row to one clinical unit at the data layer.
    (Middleware enforces request scope; this enforces persistence scope.)
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    unit = models.CharField(max_length=32, choices=ClinicalUnit.choices, db_index=True)

    class Meta:
        abstract = True
