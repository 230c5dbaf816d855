# census_core/admissions/models.py
from django.db import models

from census_core.admissions.constants import PatientStatus
from census_core.common.models import UnitScopedModel


class AdmissionRecord(UnitScopedModel):
    """
    One admission episode. Live census rows and mortality archive rows share
    this shape and the same id; an episode sits in exactly one table.
    """
    # unit-scoped display serial ("001", "M-004"); never reassigned
    serial_number = models.CharField(max_length=16, blank=True, default="")

    # external MR number, upper-cased
    registration_number = models.CharField(max_length=64)
    name = models.CharField(max_length=255)

    gender = models.CharField(max_length=16)
    category = models.CharField(max_length=32)
    location = models.CharField(max_length=32)
    code_status = models.CharField(max_length=16)
    consultant = models.CharField(max_length=255)

    admission_date = models.DateField()
    discharge_date = models.DateField(null=True, blank=True)

    # cache of the calculator at save time; live views recompute it
    length_of_stay = models.PositiveIntegerField(default=0)

    DOCUMENT_FIELDS = (
        "unit",
        "serial_number",
        "registration_number",
        "name",
        "gender",
        "category",
        "location",
        "code_status",
        "consultant",
        "admission_date",
        "discharge_date",
        "length_of_stay",
        "status",
    )

    class Meta:
        abstract = True

    def to_document(self) -> dict:
        doc = {"id": self.id}
        for field in self.DOCUMENT_FIELDS:
            doc[field] = getattr(self, field)
        return doc

    def __str__(self) -> str:
        return f"{self.unit}/{self.serial_number} {self.name} ({self.registration_number})"


class CensusRecord(AdmissionRecord):
    status = models.CharField(max_length=16, choices=PatientStatus.LIVE_CHOICES, default=PatientStatus.ACTIVE)

    class Meta:
        db_table = "admissions_census_record"
        indexes = [
            models.Index(fields=["unit", "status"], name="ix_census_unit_status"),
            models.Index(fields=["unit", "admission_date"], name="ix_census_unit_admitted"),
        ]


class MortalityRecord(AdmissionRecord):
    # date of death
    discharge_date = models.DateField()

    status = models.CharField(max_length=16, choices=PatientStatus.ARCHIVED_CHOICES, default=PatientStatus.DECEASED)

    class Meta:
        db_table = "admissions_mortality_record"
        indexes = [
            models.Index(fields=["unit", "discharge_date"], name="ix_mortality_unit_died"),
        ]
