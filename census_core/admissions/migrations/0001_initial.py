import uuid

from django.db import migrations, models

UNIT_CHOICES = [('HDU', 'High Dependency'), ('ICU', 'Intensive Care'), ('TRANSPLANT', 'Transplant Bay'), ('4th-WARD', 'Ward'), ('WARD5', '5th Floor Ward')]
LIVE_STATUS_CHOICES = [('Active', 'Active'), ('Discharged', 'Discharged')]
ARCHIVED_STATUS_CHOICES = [('Deceased', 'Deceased')]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CensusRecord",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("unit", models.CharField(choices=UNIT_CHOICES, db_index=True, max_length=32)),
                ("serial_number", models.CharField(blank=True, default="", max_length=16)),
                ("registration_number", models.CharField(max_length=64)),
                ("name", models.CharField(max_length=255)),
                ("gender", models.CharField(max_length=16)),
                ("category", models.CharField(max_length=32)),
                ("location", models.CharField(max_length=32)),
                ("code_status", models.CharField(max_length=16)),
                ("consultant", models.CharField(max_length=255)),
                ("admission_date", models.DateField()),
                ("discharge_date", models.DateField(blank=True, null=True)),
                ("length_of_stay", models.PositiveIntegerField(default=0)),
                ("status", models.CharField(choices=LIVE_STATUS_CHOICES, default="Active", max_length=16)),
            ],
            options={
                "db_table": "admissions_census_record",
                "abstract": False,
                "indexes": [
                    models.Index(fields=["unit", "status"], name="ix_census_unit_status"),
                    models.Index(fields=["unit", "admission_date"], name="ix_census_unit_admitted"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MortalityRecord",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("unit", models.CharField(choices=UNIT_CHOICES, db_index=True, max_length=32)),
                ("serial_number", models.CharField(blank=True, default="", max_length=16)),
                ("registration_number", models.CharField(max_length=64)),
                ("name", models.CharField(max_length=255)),
                ("gender", models.CharField(max_length=16)),
                ("category", models.CharField(max_length=32)),
                ("location", models.CharField(max_length=32)),
                ("code_status", models.CharField(max_length=16)),
                ("consultant", models.CharField(max_length=255)),
                ("admission_date", models.DateField()),
                ("discharge_date", models.DateField()),
                ("length_of_stay", models.PositiveIntegerField(default=0)),
                ("status", models.CharField(choices=ARCHIVED_STATUS_CHOICES, default="Deceased", max_length=16)),
            ],
            options={
                "db_table": "admissions_mortality_record",
                "abstract": False,
                "indexes": [
                    models.Index(fields=["unit", "discharge_date"], name="ix_mortality_unit_died"),
                ],
            },
        ),
    ]
