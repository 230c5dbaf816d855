import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditEvent",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "unit",
                    models.CharField(
                        choices=[('HDU', 'High Dependency'), ('ICU', 'Intensive Care'), ('TRANSPLANT', 'Transplant Bay'), ('4th-WARD', 'Ward'), ('WARD5', '5th Floor Ward')],
                        db_index=True,
                        max_length=32,
                    ),
                ),
                ("event_code", models.CharField(db_index=True, max_length=128)),
                ("entity_type", models.CharField(db_index=True, max_length=128)),
                ("entity_id", models.UUIDField(db_index=True)),
                ("occurred_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("metadata", models.JSONField(default=dict)),
                (
                    "actor_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="census_audit_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "audit_audit_event",
                "indexes": [
                    models.Index(fields=["unit", "occurred_at"], name="ix_audit_unit_time"),
                    models.Index(fields=["entity_type", "entity_id"], name="ix_audit_entity"),
                    models.Index(fields=["unit", "event_code"], name="ix_audit_unit_code"),
                ],
            },
        ),
    ]
