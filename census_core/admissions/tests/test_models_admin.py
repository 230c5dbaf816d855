from datetime import date

import pytest
from django.contrib import admin
from django.core.exceptions import ValidationError
from django.test import RequestFactory

from census_core.admissions.admin import CensusRecordAdmin, MortalityRecordAdmin
from census_core.admissions.models import CensusRecord, MortalityRecord

pytestmark = pytest.mark.django_db


def _census_row(unit, **overrides):
    fields = {
        "unit": unit,
        "serial_number": "001",
        "registration_number": "MR-7",
        "name": "IMRAN BUTT",
        "gender": "Male",
        "category": "Medicine",
        "location": "WARD",
        "code_status": "Full Code",
        "consultant": "Dr. Ruqaya",
        "admission_date": date(2025, 3, 1),
    }
    fields.update(overrides)
    return CensusRecord.objects.create(**fields)


def test_census_row_rejects_deceased_status(unit):
    row = _census_row(unit)
    row.status = "Deceased"

    with pytest.raises(ValidationError) as exc:
        row.full_clean()
    assert "status" in exc.value.message_dict


def test_mortality_row_only_accepts_deceased(unit):
    row = MortalityRecord(
        unit=unit,
        serial_number="M-001",
        registration_number="MR-8",
        name="ZAHID KHAN",
        gender="Male",
        category="Medicine",
        location="WARD",
        code_status="DNR",
        consultant="Dr. Ruqaya",
        admission_date=date(2025, 3, 1),
        discharge_date=date(2025, 3, 4),
        status="Active",
    )
    with pytest.raises(ValidationError) as exc:
        row.full_clean()
    assert "status" in exc.value.message_dict


@pytest.mark.parametrize("model_admin_class,model", [(CensusRecordAdmin, CensusRecord), (MortalityRecordAdmin, MortalityRecord)])
def test_admin_form_leaves_lifecycle_fields_alone(user, model_admin_class, model):
    request = RequestFactory().get("/admin/")
    request.user = user
    form_class = model_admin_class(model, admin.site).get_form(request)

    for field in ("status", "admission_date", "discharge_date", "length_of_stay", "serial_number", "unit"):
        assert field not in form_class.base_fields
    assert "name" in form_class.base_fields
