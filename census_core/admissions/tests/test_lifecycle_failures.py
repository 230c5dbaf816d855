import logging
from datetime import date
from unittest import mock
from uuid import uuid4

import pytest
from django.db import DatabaseError

from census_core.admissions.constants import MORTALITY_RECORDS, PATIENTS, PatientStatus
from census_core.admissions.exceptions import NotPermitted, PartialArchiveError, PersistenceError
from census_core.admissions.services import AdmissionService
from census_core.admissions.store import DocumentStore, StoreError


@pytest.fixture
def mock_store():
    return mock.create_autospec(DocumentStore, instance=True)


@pytest.fixture
def live_record(unit):
    return {
        "id": uuid4(),
        "unit": unit,
        "serial_number": "004",
        "registration_number": "MR-55",
        "name": "KAMRAN ALI",
        "gender": "Male",
        "category": "Cardiology",
        "location": "ICU",
        "code_status": "DNR",
        "consultant": "Dr. Shoaib",
        "admission_date": date(2025, 3, 1),
        "discharge_date": None,
        "length_of_stay": 0,
        "status": PatientStatus.ACTIVE,
    }


@pytest.mark.parametrize("field", ["name", "registration_number", "gender", "consultant", "admission_date"])
def test_invalid_admission_never_reaches_store(ctx, mock_store, admission_data, field):
    data = {**admission_data, field: None}

    result = AdmissionService.admit(ctx=ctx, data=data, store=mock_store)

    assert not result.ok
    assert field in result.errors
    assert mock_store.mock_calls == []


def test_invalid_revision_never_reaches_store(ctx, mock_store, admission_data):
    result = AdmissionService.revise(
        ctx=ctx,
        record_id=uuid4(),
        data={**admission_data, "name": "X"},
        store=mock_store,
    )
    assert not result.ok
    assert mock_store.mock_calls == []


def test_invalid_death_record_never_reaches_store(ctx, mock_store, admission_data):
    result = AdmissionService.record_death(ctx=ctx, data=admission_data, store=mock_store)
    assert result.errors == {"discharge_date": "Date of death required."}
    assert mock_store.mock_calls == []


def test_not_permitted_before_any_store_call(staff_ctx, mock_store, live_record):
    with pytest.raises(NotPermitted):
        AdmissionService.archive(ctx=staff_ctx, record=live_record, store=mock_store)
    with pytest.raises(NotPermitted):
        AdmissionService.delete(ctx=staff_ctx, collection=PATIENTS, record_id=live_record["id"], store=mock_store)
    assert mock_store.mock_calls == []


def test_store_failure_on_create_surfaces_as_persistence_error(ctx, mock_store, admission_data, caplog):
    mock_store.snapshot.return_value = []
    mock_store.create.side_effect = DatabaseError("connection reset")
    before = dict(admission_data)

    with caplog.at_level(logging.ERROR, logger="census_core.admissions.services"):
        with pytest.raises(PersistenceError):
            AdmissionService.admit(ctx=ctx, data=admission_data, store=mock_store)

    assert admission_data == before
    assert any(r.levelno == logging.ERROR for r in caplog.records)


@pytest.mark.django_db
def test_archive_writes_copy_before_deleting_live(ctx, mock_store, live_record):
    AdmissionService.archive(ctx=ctx, record=live_record, store=mock_store)

    assert [c[0] for c in mock_store.mock_calls] == ["create_with_id", "delete"]

    _, args, _ = mock_store.mock_calls[0]
    collection, record_id, copy = args
    assert collection == MORTALITY_RECORDS
    assert record_id == live_record["id"]
    assert copy["status"] == PatientStatus.DECEASED
    assert copy["discharge_date"] == ctx.today

    mock_store.delete.assert_called_once_with(PATIENTS, live_record["id"])


@pytest.mark.django_db
def test_archive_does_not_mutate_input(ctx, mock_store, live_record):
    before = dict(live_record)
    AdmissionService.archive(ctx=ctx, record=live_record, store=mock_store)
    assert live_record == before


def test_failed_archive_write_leaves_live_record(ctx, mock_store, live_record):
    mock_store.create_with_id.side_effect = StoreError("quota exceeded")

    with pytest.raises(PersistenceError) as exc_info:
        AdmissionService.archive(ctx=ctx, record=live_record, store=mock_store)

    assert not isinstance(exc_info.value, PartialArchiveError)
    mock_store.delete.assert_not_called()


def test_failed_live_delete_is_partial_archive(ctx, mock_store, live_record, caplog):
    mock_store.delete.side_effect = DatabaseError("lock timeout")

    with caplog.at_level(logging.CRITICAL, logger="census_core.admissions.services"):
        with pytest.raises(PartialArchiveError) as exc_info:
            AdmissionService.archive(ctx=ctx, record=live_record, store=mock_store)

    assert exc_info.value.record_id == live_record["id"]
    # archive copy stays written, nothing is rolled back
    mock_store.create_with_id.assert_called_once()
    assert [c[0] for c in mock_store.mock_calls] == ["create_with_id", "delete"]
    assert any(r.levelno == logging.CRITICAL for r in caplog.records)


def test_archive_with_unreadable_admission_date_is_field_error(ctx, mock_store, live_record):
    broken = {**live_record, "admission_date": "first of march"}

    result = AdmissionService.archive(ctx=ctx, record=broken, expiry_date=date(2025, 3, 5), store=mock_store)

    assert not result.ok
    assert result.errors == {"admission_date": "Invalid date."}
    assert mock_store.mock_calls == []
