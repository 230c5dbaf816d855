import pytest

from census_core.admissions.models import CensusRecord, MortalityRecord
from census_core.tests.helpers import scoped

pytestmark = pytest.mark.django_db

PAYLOAD = {
    "name": "farhan qureshi",
    "registration_number": "mr-3301",
    "gender": "Male",
    "category": "Urology",
    "location": "WARD",
    "code_status": "Full Code",
    "consultant": "Dr. Murtaza",
    "admission_date": "2025-03-01",
}


def _admit(client, unit, **overrides):
    r = client.post("/api/v1/census/", {**PAYLOAD, **overrides}, format="json", **scoped(unit))
    assert r.status_code == 201, r.data
    return r.data


def test_admit_returns_created_record(api_client, unit):
    data = _admit(api_client, unit)

    assert data["serial_number"] == "001"
    assert data["status"] == "Active"
    assert data["name"] == "FARHAN QURESHI"
    assert data["registration_number"] == "MR-3301"
    assert data["discharge_date"] is None
    assert data["live_length_of_stay"] == data["length_of_stay"]

    assert _admit(api_client, unit)["serial_number"] == "002"


def test_admit_field_errors_use_envelope(api_client, unit):
    r = api_client.post("/api/v1/census/", {**PAYLOAD, "name": "Al", "gender": ""}, format="json", **scoped(unit))

    assert r.status_code == 400
    err = r.data["error"]
    assert err["code"] == "validation_error"
    assert err["details"]["name"] == ["Name must be at least 3 characters."]
    assert err["details"]["gender"] == ["Selection required."]
    assert "request_id" in err
    assert CensusRecord.objects.count() == 0


def test_missing_unit_header_is_400(api_client):
    r = api_client.get("/api/v1/census/")
    assert r.status_code == 400
    assert r.data["error"]["message"] == "Missing unit header (X-Unit)."


def test_unknown_unit_header_is_400(api_client):
    r = api_client.get("/api/v1/census/", **scoped("OPD"))
    assert r.status_code == 400
    assert r.data["error"]["message"] == "Unknown clinical unit in X-Unit header."


def test_staff_can_read_but_not_write(api_client, staff_client, unit):
    _admit(api_client, unit)

    r = staff_client.get("/api/v1/census/", **scoped(unit))
    assert r.status_code == 200
    assert r.data["count"] == 1

    r = staff_client.post("/api/v1/census/", PAYLOAD, format="json", **scoped(unit))
    assert r.status_code == 403
    assert r.data["error"]["code"] == "permission_denied"


def test_anonymous_is_rejected(client, unit):
    r = client.get("/api/v1/census/", **scoped(unit))
    assert r.status_code in (401, 403)


def test_patch_discharge_keeps_record_live(consultant_client, unit):
    created = _admit(consultant_client, unit)

    r = consultant_client.patch(
        f"/api/v1/census/{created['id']}/",
        {"discharge_date": "2025-03-10"},
        format="json",
        **scoped(unit),
    )
    assert r.status_code == 200, r.data
    assert r.data["status"] == "Discharged"
    assert r.data["length_of_stay"] == 9
    assert r.data["live_length_of_stay"] == 9
    assert r.data["serial_number"] == "001"

    listed = consultant_client.get("/api/v1/census/?status=Discharged", **scoped(unit))
    assert [row["id"] for row in listed.data["results"]] == [created["id"]]


def test_put_is_a_full_overwrite(consultant_client, unit):
    created = _admit(consultant_client, unit)

    r = consultant_client.put(
        f"/api/v1/census/{created['id']}/",
        {**PAYLOAD, "location": "ICU", "code_status": "DNR"},
        format="json",
        **scoped(unit),
    )
    assert r.status_code == 200, r.data
    assert r.data["location"] == "ICU"
    assert r.data["code_status"] == "DNR"

    r = consultant_client.put(f"/api/v1/census/{created['id']}/", {"name": "Farhan"}, format="json", **scoped(unit))
    assert r.status_code == 400
    assert "registration_number" in r.data["error"]["details"]


def test_archive_moves_record(consultant_client, unit):
    created = _admit(consultant_client, unit)
    consultant_client.patch(
        f"/api/v1/census/{created['id']}/", {"discharge_date": "2025-03-10"}, format="json", **scoped(unit)
    )

    r = consultant_client.post(f"/api/v1/census/{created['id']}/archive/", {}, format="json", **scoped(unit))
    assert r.status_code == 200, r.data
    assert r.data["status"] == "Deceased"
    assert r.data["discharge_date"] == "2025-03-10"
    assert r.data["length_of_stay"] == 9

    assert consultant_client.get(f"/api/v1/census/{created['id']}/", **scoped(unit)).status_code == 404

    archived = consultant_client.get(f"/api/v1/mortality/{created['id']}/", **scoped(unit))
    assert archived.status_code == 200
    assert archived.data["serial_number"] == "001"

    again = consultant_client.post(f"/api/v1/census/{created['id']}/archive/", {}, format="json", **scoped(unit))
    assert again.status_code == 404
    assert MortalityRecord.objects.count() == 1


def test_archive_expiry_before_admission_is_400(consultant_client, unit):
    created = _admit(consultant_client, unit)

    r = consultant_client.post(
        f"/api/v1/census/{created['id']}/archive/",
        {"expiry_date": "2025-02-01"},
        format="json",
        **scoped(unit),
    )
    assert r.status_code == 400
    assert r.data["error"]["details"]["discharge_date"] == ["Discharge cannot be before admission."]
    assert CensusRecord.objects.filter(id=created["id"]).exists()


def test_records_are_invisible_to_other_units(api_client, unit):
    created = _admit(api_client, unit)

    assert api_client.get(f"/api/v1/census/{created['id']}/", **scoped("HDU")).status_code == 404
    assert api_client.get("/api/v1/census/", **scoped("HDU")).data["count"] == 0


def test_delete_is_admin_only(api_client, consultant_client, unit):
    created = _admit(consultant_client, unit)

    r = consultant_client.delete(f"/api/v1/census/{created['id']}/", **scoped(unit))
    assert r.status_code == 403

    r = api_client.delete(f"/api/v1/census/{created['id']}/", **scoped(unit))
    assert r.status_code == 204
    assert not CensusRecord.objects.exists()

    # deleting again is a no-op
    assert api_client.delete(f"/api/v1/census/{created['id']}/", **scoped(unit)).status_code == 204


def test_list_search_ordering_and_bad_params(api_client, unit):
    _admit(api_client, unit)
    _admit(api_client, unit, name="nadia", registration_number="MR-77", consultant="Dr. Kiran Nasir")

    r = api_client.get("/api/v1/census/?q=kiran", **scoped(unit))
    assert [row["name"] for row in r.data["results"]] == ["NADIA"]

    r = api_client.get("/api/v1/census/?ordering=serial", **scoped(unit))
    assert [row["serial_number"] for row in r.data["results"]] == ["001", "002"]

    r = api_client.get("/api/v1/census/", **scoped(unit))
    assert [row["serial_number"] for row in r.data["results"]] == ["002", "001"]

    r = api_client.get("/api/v1/census/?ordering=colour", **scoped(unit))
    assert r.status_code == 400

    r = api_client.get("/api/v1/census/?admitted_from=yesterday", **scoped(unit))
    assert r.status_code == 400


def test_summary_export_and_consultants(api_client, unit):
    created = _admit(api_client, unit)
    _admit(api_client, unit, registration_number="MR-2")
    api_client.post(
        f"/api/v1/census/{created['id']}/archive/", {"expiry_date": "2025-03-04"}, format="json", **scoped(unit)
    )

    summary = api_client.get("/api/v1/census/summary/?year=2025", **scoped(unit))
    assert summary.status_code == 200
    assert summary.data["active"] == 1
    assert summary.data["mortality"] == 1
    assert summary.data["monthly_mortality"][2] == {"month": "Mar", "count": 1}

    assert api_client.get("/api/v1/census/summary/?year=abc", **scoped(unit)).status_code == 400

    export = api_client.get("/api/v1/census/export/", **scoped(unit))
    assert export.status_code == 200
    assert export.data["columns"][0] == "S.No"
    assert [row["S.No"] for row in export.data["rows"]] == ["002"]

    consultants = api_client.get("/api/v1/census/consultants/", **scoped(unit))
    assert "Dr. Murtaza" in consultants.data["consultants"]


def test_mortality_direct_entry_and_revision(consultant_client, unit):
    r = consultant_client.post(
        "/api/v1/mortality/",
        {**PAYLOAD, "discharge_date": "2025-03-06"},
        format="json",
        **scoped(unit),
    )
    assert r.status_code == 201, r.data
    assert r.data["serial_number"] == "M-001"
    assert r.data["status"] == "Deceased"
    assert r.data["length_of_stay"] == 5

    rid = r.data["id"]
    p = consultant_client.patch(f"/api/v1/mortality/{rid}/", {"discharge_date": "2025-03-08"}, format="json", **scoped(unit))
    assert p.status_code == 200, p.data
    assert p.data["length_of_stay"] == 7
    assert p.data["serial_number"] == "M-001"

    missing = consultant_client.post("/api/v1/mortality/", PAYLOAD, format="json", **scoped(unit))
    assert missing.status_code == 400
    assert missing.data["error"]["details"]["discharge_date"] == ["Date of death required."]

    listed = consultant_client.get("/api/v1/mortality/?q=farhan", **scoped(unit))
    assert listed.data["count"] == 1

    export = consultant_client.get("/api/v1/mortality/export/", **scoped(unit))
    assert export.data["rows"][0]["Out-Date"] == "2025-03-08"


def test_list_filters_by_status_and_admission_range(api_client, unit):
    early = _admit(api_client, unit, admission_date="2025-02-01", registration_number="MR-1")
    late = _admit(api_client, unit, admission_date="2025-03-10", registration_number="MR-2")
    r = api_client.patch(
        f"/api/v1/census/{early['id']}/", {"discharge_date": "2025-02-05"}, format="json", **scoped(unit)
    )
    assert r.data["status"] == "Discharged"

    r = api_client.get("/api/v1/census/?status=Discharged", **scoped(unit))
    assert [row["id"] for row in r.data["results"]] == [early["id"]]

    r = api_client.get("/api/v1/census/?admitted_from=2025-03-01&admitted_to=2025-03-31", **scoped(unit))
    assert [row["id"] for row in r.data["results"]] == [late["id"]]

    r = api_client.get("/api/v1/census/?status=Deceased", **scoped(unit))
    assert r.status_code == 400
    assert "status" in r.data["error"]["details"]


def test_mortality_list_filters_by_date_of_death(api_client, unit):
    early = api_client.post("/api/v1/mortality/", {**PAYLOAD, "discharge_date": "2025-03-02"}, format="json", **scoped(unit))
    late = api_client.post(
        "/api/v1/mortality/",
        {**PAYLOAD, "registration_number": "MR-77", "discharge_date": "2025-03-20"},
        format="json",
        **scoped(unit),
    )
    assert early.status_code == late.status_code == 201

    r = api_client.get("/api/v1/mortality/?died_from=2025-03-10", **scoped(unit))
    assert [row["id"] for row in r.data["results"]] == [late.data["id"]]

    r = api_client.get("/api/v1/mortality/?died_to=2025-03-10", **scoped(unit))
    assert [row["id"] for row in r.data["results"]] == [early.data["id"]]
