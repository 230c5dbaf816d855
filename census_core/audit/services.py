# census_core/audit/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import UUID

from django.db import DatabaseError, transaction

from census_core.audit.models import AuditEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecord:
    event_code: str
    entity_type: str
    entity_id: UUID
    unit: str
    actor_user_id: int | None
    metadata: Dict[str, Any]
    persisted: bool


class AuditService:
    """
    Central audit writer.

    Appends are best-effort: a failed insert is logged and reported through
    AuditRecord.persisted, it never fails the clinical operation that triggered it.
    """

    @staticmethod
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id: UUID,
        unit: str,
        actor_user_id: int | None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        metadata = metadata or {}
        persisted = True

        try:
            # savepoint keeps an outer test/request transaction usable on failure
            with transaction.atomic():
                AuditEvent.objects.create(
                    unit=unit,
                    event_code=event_code,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    actor_user_id=actor_user_id,
                    metadata=metadata,
                )
        except DatabaseError:
            persisted = False
            logger.warning(
                "Audit append failed for %s %s:%s",
                event_code,
                entity_type,
                entity_id,
                exc_info=True,
            )

        return AuditRecord(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            unit=unit,
            actor_user_id=actor_user_id,
            metadata=metadata,
            persisted=persisted,
        )
