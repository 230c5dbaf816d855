# census_core/admissions/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from census_core.admissions.constants import PatientStatus
from census_core.admissions.los import live_length_of_stay


class AdmissionFormSerializer(serializers.Serializer):
    """
    Admission form contract (POST/PUT; PATCH with partial=True).

    Only shape is checked here. Field rules (name pattern, selections,
    date ordering) live in admissions.validation and come back as
    field errors from the service.
    """
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    registration_number = serializers.CharField(max_length=64, required=False, allow_blank=True)
    gender = serializers.CharField(max_length=16, required=False, allow_blank=True)
    category = serializers.CharField(max_length=32, required=False, allow_blank=True)
    location = serializers.CharField(max_length=32, required=False, allow_blank=True)
    code_status = serializers.CharField(max_length=16, required=False, allow_blank=True)
    consultant = serializers.CharField(max_length=255, required=False, allow_blank=True)
    admission_date = serializers.DateField(required=False, allow_null=True)
    discharge_date = serializers.DateField(required=False, allow_null=True)


class ArchiveSerializer(serializers.Serializer):
    # date of death; defaults to the discharge date, then today
    expiry_date = serializers.DateField(required=False, allow_null=True)


class AdmissionRecordSerializer(serializers.Serializer):
    """
    Read shape for both collections. Accepts model instances or the
    store's plain dict documents.
    """
    id = serializers.UUIDField(read_only=True)
    unit = serializers.CharField(read_only=True)
    serial_number = serializers.CharField(read_only=True)
    registration_number = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    gender = serializers.CharField(read_only=True)
    category = serializers.CharField(read_only=True)
    location = serializers.CharField(read_only=True)
    code_status = serializers.CharField(read_only=True)
    consultant = serializers.CharField(read_only=True)
    admission_date = serializers.DateField(read_only=True)
    discharge_date = serializers.DateField(read_only=True, allow_null=True)
    status = serializers.ChoiceField(choices=PatientStatus.CHOICES, read_only=True)
    length_of_stay = serializers.IntegerField(read_only=True)
    live_length_of_stay = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    def get_live_length_of_stay(self, obj) -> int:
        return live_length_of_stay(obj, self.context.get("today"))


class MonthlyCountSerializer(serializers.Serializer):
    month = serializers.CharField()
    count = serializers.IntegerField()


class CensusSummarySerializer(serializers.Serializer):
    unit = serializers.CharField()
    year = serializers.IntegerField()
    active = serializers.IntegerField()
    discharged = serializers.IntegerField()
    mortality = serializers.IntegerField()
    monthly_mortality = MonthlyCountSerializer(many=True)


class ExportSerializer(serializers.Serializer):
    columns = serializers.ListField(child=serializers.CharField())
    rows = serializers.ListField(child=serializers.DictField())


class ConsultantListSerializer(serializers.Serializer):
    consultants = serializers.ListField(child=serializers.CharField())
