from datetime import date
from uuid import uuid4

import pytest

from census_core.admissions.constants import MORTALITY_RECORDS, PATIENTS
from census_core.admissions.models import CensusRecord, MortalityRecord
from census_core.admissions.store import StoreError

pytestmark = pytest.mark.django_db


@pytest.fixture
def document(unit):
    return {
        "unit": unit,
        "serial_number": "001",
        "registration_number": "MR-1",
        "name": "SANA TARIQ",
        "gender": "Female",
        "category": "Nephrology",
        "location": "WARD",
        "code_status": "Full Code",
        "consultant": "Dr. Aysha",
        "admission_date": date(2025, 3, 1),
        "discharge_date": None,
        "length_of_stay": 0,
        "status": "Active",
    }


def test_create_fetch_round_trip(store, document):
    record_id = store.create(PATIENTS, document)

    fetched = store.fetch(PATIENTS, record_id)
    assert fetched["id"] == record_id
    assert fetched["name"] == "SANA TARIQ"
    assert store.fetch(PATIENTS, uuid4()) is None


def test_unknown_keys_are_ignored(store, document):
    record_id = store.create(PATIENTS, {**document, "live_length_of_stay": 3, "id": uuid4()})
    assert CensusRecord.objects.filter(id=record_id).exists()


def test_create_with_id_is_an_upsert(store, document):
    record_id = uuid4()
    death = {**document, "status": "Deceased", "discharge_date": date(2025, 3, 5)}

    store.create_with_id(MORTALITY_RECORDS, record_id, death)
    store.create_with_id(MORTALITY_RECORDS, record_id, {**death, "discharge_date": date(2025, 3, 6)})

    assert MortalityRecord.objects.filter(id=record_id).count() == 1
    assert MortalityRecord.objects.get(id=record_id).discharge_date == date(2025, 3, 6)


def test_update_overwrites_fields(store, document):
    record_id = store.create(PATIENTS, document)
    store.update(PATIENTS, record_id, {**document, "location": "ER"})
    assert store.fetch(PATIENTS, record_id)["location"] == "ER"


def test_update_missing_record_raises(store, document):
    with pytest.raises(StoreError):
        store.update(PATIENTS, uuid4(), document)


def test_delete_missing_record_is_noop(store):
    store.delete(PATIENTS, uuid4())


def test_unknown_collection(store, document):
    with pytest.raises(StoreError):
        store.create("inventory", document)


def test_snapshot_filters_by_equality(store, document):
    store.create(PATIENTS, document)
    store.create(PATIENTS, {**document, "unit": "HDU"})

    assert [d["unit"] for d in store.snapshot(PATIENTS, unit="HDU")] == ["HDU"]
    assert len(store.snapshot(PATIENTS)) == 2


def test_subscribe_delivers_initial_and_full_snapshots(store, document, unit):
    seen = []
    sub = store.subscribe(PATIENTS, seen.append, unit=unit)

    assert seen == [[]]

    first = store.create(PATIENTS, document)
    second = store.create(PATIENTS, {**document, "serial_number": "002"})
    store.delete(PATIENTS, first)

    assert len(seen) == 4
    assert {d["id"] for d in seen[2]} == {first, second}
    assert [d["id"] for d in seen[3]] == [second]

    sub.close()
    store.create(PATIENTS, {**document, "serial_number": "003"})
    assert len(seen) == 4


def test_subscription_only_hears_its_collection(store, document, unit):
    seen = []
    store.subscribe(MORTALITY_RECORDS, seen.append, unit=unit)

    store.create(PATIENTS, document)
    assert seen == [[]]


def test_failing_listener_does_not_break_writes(store, document, unit):
    calls = []

    def explode(snapshot):
        calls.append(snapshot)
        if len(calls) > 1:
            raise RuntimeError("listener bug")

    store.subscribe(PATIENTS, explode, unit=unit)
    record_id = store.create(PATIENTS, document)

    assert CensusRecord.objects.filter(id=record_id).exists()
    assert len(calls) == 2
