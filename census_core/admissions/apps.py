from django.apps import AppConfig


class AdmissionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "census_core.admissions"

    def ready(self):
        from census_core.admissions.store import connect_signals

        connect_signals()
