from django.contrib import admin

from census_core.admissions.models import CensusRecord, MortalityRecord

# moved only through AdmissionService so status and the LOS cache stay consistent
LIFECYCLE_FIELDS = (
    "unit",
    "serial_number",
    "status",
    "admission_date",
    "discharge_date",
    "length_of_stay",
)


class AdmissionRecordAdmin(admin.ModelAdmin):
    list_display = (
        "serial_number",
        "name",
        "registration_number",
        "unit",
        "status",
        "consultant",
        "admission_date",
        "discharge_date",
        "length_of_stay",
    )
    list_filter = ("unit", "status", "category", "location", "code_status")
    search_fields = ("name", "registration_number", "serial_number", "consultant")
    readonly_fields = ("id",) + LIFECYCLE_FIELDS + ("created_at", "updated_at")
    ordering = ("unit", "-admission_date")


@admin.register(CensusRecord)
class CensusRecordAdmin(AdmissionRecordAdmin):
    pass


@admin.register(MortalityRecord)
class MortalityRecordAdmin(AdmissionRecordAdmin):
    ordering = ("unit", "-discharge_date")
