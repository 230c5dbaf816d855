# census_core/audit/models.py
from django.conf import settings
from django.db import models

from census_core.common.models import UnitScopedModel


class AuditEvent(UnitScopedModel):
    """
    Append-only audit record for census and archive changes.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "census.archived"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "CensusRecord"
    entity_id = models.UUIDField(db_index=True)

    actor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="census_audit_events",
        null=True,
        blank=True,
    )

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["unit", "occurred_at"], name="ix_audit_unit_time"),
            models.Index(fields=["entity_type", "entity_id"], name="ix_audit_entity"),
            models.Index(fields=["unit", "event_code"], name="ix_audit_unit_code"),
        ]

    def __str__(self) -> str:
        return f"{self.event_code} {self.entity_type}:{self.entity_id}"
