# census_core/admissions/services.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Mapping, Optional
from uuid import UUID

from django.db import DatabaseError

from census_core.admissions import constants as C
from census_core.admissions.constants import MORTALITY_RECORDS, PATIENTS, PatientStatus
from census_core.admissions.exceptions import (
    InvalidTransition,
    NotPermitted,
    PartialArchiveError,
    PersistenceError,
    RecordNotFound,
)
from census_core.admissions.los import as_date, length_of_stay_days, saved_length_of_stay
from census_core.admissions.los import today as local_today
from census_core.admissions.models import AdmissionRecord
from census_core.admissions.serials import next_mortality_serial, next_serial
from census_core.admissions.store import DocumentStore, StoreError, default_store
from census_core.admissions.validation import (
    DISCHARGE_BEFORE_ADMISSION,
    DISCHARGE_ON_ADMIT,
    INVALID_DATE,
    normalize_admission,
    validate_admission,
)
from census_core.audit.services import AuditService
from census_core.iam import roles

logger = logging.getLogger(__name__)

ENTITY_TYPES = {
    PATIENTS: "CensusRecord",
    MORTALITY_RECORDS: "MortalityRecord",
}


@dataclass(frozen=True)
class OperationContext:
    """
    Who is acting, for which unit, and what "today" is.
    Passed into every lifecycle call instead of reading request state.
    """
    unit: str
    actor_role: Optional[str]
    actor_user_id: Optional[int] = None
    today: Optional[date] = None

    @property
    def can_manage_records(self) -> bool:
        return roles.can_manage_records(self.actor_role)

    @property
    def is_admin(self) -> bool:
        return roles.is_admin(self.actor_role)

    def reference_date(self) -> date:
        return self.today or local_today()

    @classmethod
    def from_request(cls, request, *, unit: str) -> "OperationContext":
        user = request.user
        authenticated = bool(user and user.is_authenticated)
        return cls(
            unit=unit,
            actor_role=roles.current_role(user),
            actor_user_id=user.id if authenticated else None,
        )


@dataclass(frozen=True)
class LifecycleResult:
    record: Optional[Dict[str, Any]] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


@contextmanager
def _persisting(action: str, collection: str, record_id=None):
    try:
        yield
    except (DatabaseError, StoreError) as exc:
        logger.error("Store %s failed on %s/%s", action, collection, record_id, exc_info=True)
        raise PersistenceError(f"Could not {action} {collection} record.") from exc


def _audit_dates(document: Mapping[str, Any]) -> Dict[str, Any]:
    out = {}
    for key in ("admission_date", "discharge_date"):
        value = document.get(key)
        out[key] = value.isoformat() if isinstance(value, date) else value
    return out


class AdmissionService:
    """
    Lifecycle of an admission episode across the live census and the
    mortality archive.

    Active <-> Discharged happen in place in the live census.
    Active/Discharged -> Deceased moves the record into the archive under
    the same id (archive write first, live delete second, no transaction).
    """

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    @staticmethod
    def _require_manager(ctx: OperationContext, action: str) -> None:
        if not ctx.can_manage_records:
            raise NotPermitted(action, ctx.actor_role)

    @staticmethod
    def _fetch_scoped(store: DocumentStore, ctx: OperationContext, collection: str, record_id: UUID) -> Dict[str, Any]:
        with _persisting("fetch", collection, record_id):
            current = store.fetch(collection, record_id)
        if current is None or current.get("unit") != ctx.unit:
            raise RecordNotFound(collection, record_id)
        return current

    @staticmethod
    def _audit(ctx: OperationContext, *, event_code: str, collection: str, record_id: UUID, metadata: Dict[str, Any]) -> None:
        AuditService.log(
            event_code=event_code,
            entity_type=ENTITY_TYPES[collection],
            entity_id=record_id,
            unit=ctx.unit,
            actor_user_id=ctx.actor_user_id,
            metadata=metadata,
        )

    # ---------------------------------------------------------------------
    # Live census
    # ---------------------------------------------------------------------
    @staticmethod
    def admit(*, ctx: OperationContext, data: Mapping[str, Any], store: DocumentStore | None = None) -> LifecycleResult:
        """
        (none) -> Active. Serial comes from the unit's current live snapshot.
        """
        AdmissionService._require_manager(ctx, "admit")
        store = store or default_store()
        today = ctx.reference_date()

        form = normalize_admission(data)
        errors = validate_admission(form, today=today)
        if form["discharge_date"] not in (None, ""):
            errors["discharge_date"] = DISCHARGE_ON_ADMIT
        if errors:
            return LifecycleResult(errors=errors)

        with _persisting("snapshot", PATIENTS):
            existing = store.snapshot(PATIENTS, unit=ctx.unit)

        document = {
            **form,
            "unit": ctx.unit,
            "serial_number": next_serial(existing),
            "discharge_date": None,
            "status": PatientStatus.ACTIVE,
            "length_of_stay": saved_length_of_stay(form["admission_date"], None, today),
        }

        with _persisting("create", PATIENTS):
            record_id = store.create(PATIENTS, document)

        logger.info("Admitted %s/%s into %s", ctx.unit, document["serial_number"], PATIENTS)
        AdmissionService._audit(
            ctx,
            event_code=C.EVENT_ADMITTED,
            collection=PATIENTS,
            record_id=record_id,
            metadata={"serial_number": document["serial_number"], **_audit_dates(document)},
        )
        return LifecycleResult(record={"id": record_id, **document})

    @staticmethod
    def revise(
        *,
        ctx: OperationContext,
        record_id: UUID,
        data: Mapping[str, Any],
        store: DocumentStore | None = None,
    ) -> LifecycleResult:
        """
        Full-record save of a live census row.
        A discharge date makes it Discharged, clearing it makes it Active again.
        Unit and serial are carried over from the stored row.
        """
        AdmissionService._require_manager(ctx, "revise")
        store = store or default_store()
        today = ctx.reference_date()

        form = normalize_admission(data)
        errors = validate_admission(form, today=today)
        if errors:
            return LifecycleResult(errors=errors)

        current = AdmissionService._fetch_scoped(store, ctx, PATIENTS, record_id)

        discharge = form["discharge_date"] or None
        status = PatientStatus.DISCHARGED if discharge else PatientStatus.ACTIVE
        document = {
            **form,
            "unit": current["unit"],
            "serial_number": current["serial_number"],
            "discharge_date": discharge,
            "status": status,
            "length_of_stay": saved_length_of_stay(form["admission_date"], discharge, today),
        }

        with _persisting("update", PATIENTS, record_id):
            store.update(PATIENTS, record_id, document)

        if current["status"] != status:
            logger.info("Census %s/%s: %s -> %s", ctx.unit, current["serial_number"], current["status"], status)

        AdmissionService._audit(
            ctx,
            event_code=C.EVENT_REVISED,
            collection=PATIENTS,
            record_id=record_id,
            metadata={"from_status": current["status"], "to_status": status, **_audit_dates(document)},
        )
        return LifecycleResult(record={"id": record_id, **document})

    @staticmethod
    def archive(
        *,
        ctx: OperationContext,
        record: Mapping[str, Any],
        expiry_date=None,
        store: DocumentStore | None = None,
    ) -> LifecycleResult:
        """
        Active/Discharged -> Deceased.

        Expiry date: the one supplied, else the record's discharge date,
        else today. The archive copy is upserted under the live id before the
        live row is deleted, so a retry overwrites rather than duplicates.
        If the delete fails the record stays in both collections and
        PartialArchiveError is raised.
        """
        AdmissionService._require_manager(ctx, "archive")
        store = store or default_store()

        status = record.get("status")
        if status not in PatientStatus.LIVE:
            raise InvalidTransition(status, "archive")

        record_id = record["id"]
        if record.get("unit") not in (None, ctx.unit):
            raise RecordNotFound(PATIENTS, record_id)

        try:
            expiry = as_date(expiry_date) or as_date(record.get("discharge_date")) or ctx.reference_date()
        except ValueError:
            return LifecycleResult(errors={"discharge_date": INVALID_DATE})

        try:
            admitted = as_date(record.get("admission_date"))
        except ValueError:
            return LifecycleResult(errors={"admission_date": INVALID_DATE})
        if admitted is not None and expiry < admitted:
            return LifecycleResult(errors={"discharge_date": DISCHARGE_BEFORE_ADMISSION})

        copy = {k: record[k] for k in AdmissionRecord.DOCUMENT_FIELDS if k in record}
        copy.update(
            {
                "unit": record.get("unit") or ctx.unit,
                "status": PatientStatus.DECEASED,
                "discharge_date": expiry,
                "length_of_stay": length_of_stay_days(admitted, expiry) if admitted else 0,
            }
        )

        with _persisting("archive", MORTALITY_RECORDS, record_id):
            store.create_with_id(MORTALITY_RECORDS, record_id, copy)

        try:
            store.delete(PATIENTS, record_id)
        except (DatabaseError, StoreError) as exc:
            logger.critical(
                "Partial archive: %s written to %s but still in %s",
                record_id,
                MORTALITY_RECORDS,
                PATIENTS,
                exc_info=True,
            )
            raise PartialArchiveError(record_id) from exc

        logger.info("Archived %s/%s: %s -> %s", copy["unit"], copy.get("serial_number", ""), status, PatientStatus.DECEASED)
        AdmissionService._audit(
            ctx,
            event_code=C.EVENT_ARCHIVED,
            collection=MORTALITY_RECORDS,
            record_id=record_id,
            metadata={"from_status": status, "length_of_stay": copy["length_of_stay"], **_audit_dates(copy)},
        )
        return LifecycleResult(record={"id": record_id, **copy})

    @staticmethod
    def archive_by_id(
        *,
        ctx: OperationContext,
        record_id: UUID,
        expiry_date=None,
        store: DocumentStore | None = None,
    ) -> LifecycleResult:
        AdmissionService._require_manager(ctx, "archive")
        store = store or default_store()

        current = AdmissionService._fetch_scoped(store, ctx, PATIENTS, record_id)
        return AdmissionService.archive(ctx=ctx, record=current, expiry_date=expiry_date, store=store)

    # ---------------------------------------------------------------------
    # Mortality archive
    # ---------------------------------------------------------------------
    @staticmethod
    def revise_mortality(
        *,
        ctx: OperationContext,
        record_id: UUID,
        data: Mapping[str, Any],
        store: DocumentStore | None = None,
    ) -> LifecycleResult:
        """Deceased -> Deceased. Serial and archive membership never change."""
        AdmissionService._require_manager(ctx, "revise")
        store = store or default_store()

        form = normalize_admission(data)
        errors = validate_admission(form, today=ctx.reference_date(), mortality=True)
        if errors:
            return LifecycleResult(errors=errors)

        current = AdmissionService._fetch_scoped(store, ctx, MORTALITY_RECORDS, record_id)

        document = {
            **form,
            "unit": current["unit"],
            "serial_number": current["serial_number"],
            "status": PatientStatus.DECEASED,
            "length_of_stay": length_of_stay_days(form["admission_date"], form["discharge_date"]),
        }

        with _persisting("update", MORTALITY_RECORDS, record_id):
            store.update(MORTALITY_RECORDS, record_id, document)

        AdmissionService._audit(
            ctx,
            event_code=C.EVENT_MORTALITY_REVISED,
            collection=MORTALITY_RECORDS,
            record_id=record_id,
            metadata=_audit_dates(document),
        )
        return LifecycleResult(record={"id": record_id, **document})

    @staticmethod
    def record_death(*, ctx: OperationContext, data: Mapping[str, Any], store: DocumentStore | None = None) -> LifecycleResult:
        """
        Direct entry into the mortality archive for a patient who never
        had a live census row. Serial uses the M-%03d series.
        """
        AdmissionService._require_manager(ctx, "record")
        store = store or default_store()

        form = normalize_admission(data)
        errors = validate_admission(form, today=ctx.reference_date(), mortality=True)
        if errors:
            return LifecycleResult(errors=errors)

        with _persisting("snapshot", MORTALITY_RECORDS):
            existing = store.snapshot(MORTALITY_RECORDS, unit=ctx.unit)

        document = {
            **form,
            "unit": ctx.unit,
            "serial_number": next_mortality_serial(existing),
            "status": PatientStatus.DECEASED,
            "length_of_stay": length_of_stay_days(form["admission_date"], form["discharge_date"]),
        }

        with _persisting("create", MORTALITY_RECORDS):
            record_id = store.create(MORTALITY_RECORDS, document)

        logger.info("Recorded death %s/%s", ctx.unit, document["serial_number"])
        AdmissionService._audit(
            ctx,
            event_code=C.EVENT_MORTALITY_RECORDED,
            collection=MORTALITY_RECORDS,
            record_id=record_id,
            metadata={"serial_number": document["serial_number"], **_audit_dates(document)},
        )
        return LifecycleResult(record={"id": record_id, **document})

    # ---------------------------------------------------------------------
    # Terminal
    # ---------------------------------------------------------------------
    @staticmethod
    def delete(
        *,
        ctx: OperationContext,
        collection: str,
        record_id: UUID,
        store: DocumentStore | None = None,
    ) -> bool:
        """
        Permanently remove a record. Deleting an absent id is a no-op and
        returns False. Admin-only is enforced by the caller.
        """
        AdmissionService._require_manager(ctx, "delete")
        if collection not in C.COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        store = store or default_store()

        with _persisting("fetch", collection, record_id):
            current = store.fetch(collection, record_id)
        if current is None:
            return False
        if current.get("unit") != ctx.unit:
            raise RecordNotFound(collection, record_id)

        with _persisting("delete", collection, record_id):
            store.delete(collection, record_id)

        logger.info("Deleted %s/%s from %s", ctx.unit, current.get("serial_number", ""), collection)
        AdmissionService._audit(
            ctx,
            event_code=C.EVENT_DELETED if collection == PATIENTS else C.EVENT_MORTALITY_DELETED,
            collection=collection,
            record_id=record_id,
            metadata={"serial_number": current.get("serial_number", ""), "status": current.get("status")},
        )
        return True
