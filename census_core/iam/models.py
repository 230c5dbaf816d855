# census_core/iam/models.py
import uuid

from django.conf import settings
from django.db import models

from census_core.common.units import ClinicalUnit


class StaffRole(models.TextChoices):
    ADMIN = "Admin", "Admin"
    CONSULTANT = "Consultant", "Consultant"
    STAFF = "Staff", "Staff"


class StaffStatus(models.TextChoices):
    ACTIVE = "Active", "Active"
    LEFT = "Left", "Left"


class UserProfile(models.Model):
    """
    Dashboard identity wrapper anchored to Django's AUTH_USER_MODEL.
    Carries the authoritative role; users marked LEFT can no longer sign in.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="census_profile")

    role = models.CharField(max_length=16, choices=StaffRole.choices, default=StaffRole.STAFF, db_index=True)
    status = models.CharField(max_length=16, choices=StaffStatus.choices, default=StaffStatus.ACTIVE, db_index=True)
    assigned_unit = models.CharField(max_length=32, choices=ClinicalUnit.choices, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_user_profile"

    def __str__(self) -> str:
        return f"{self.user_id} ({self.role})"
