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
            name="UserProfile",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "role",
                    models.CharField(
                        choices=[("Admin", "Admin"), ("Consultant", "Consultant"), ("Staff", "Staff")],
                        db_index=True,
                        default="Staff",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("Active", "Active"), ("Left", "Left")],
                        db_index=True,
                        default="Active",
                        max_length=16,
                    ),
                ),
                (
                    "assigned_unit",
                    models.CharField(
                        blank=True,
                        choices=[('HDU', 'High Dependency'), ('ICU', 'Intensive Care'), ('TRANSPLANT', 'Transplant Bay'), ('4th-WARD', 'Ward'), ('WARD5', '5th Floor Ward')],
                        default="",
                        max_length=32,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="census_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "iam_user_profile",
            },
        ),
    ]
