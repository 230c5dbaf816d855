# census_core/iam/services/staff.py
from __future__ import annotations

import logging

from django.contrib.auth.models import Group
from django.db import transaction
from rest_framework.exceptions import PermissionDenied, ValidationError

from census_core.audit.services import AuditService
from census_core.iam.models import StaffRole, StaffStatus, UserProfile

logger = logging.getLogger(__name__)

EVENT_ROLE_CHANGED = "staff.role_changed"
EVENT_ACCESS_REVOKED = "staff.access_revoked"
EVENT_ACCESS_RESTORED = "staff.access_restored"

ENTITY_TYPE = "UserProfile"

SELF_CHANGE_MSG = "Admins cannot change their own role or access."


def list_staff_profiles(*, status: str | None = None, role: str | None = None):
    qs = UserProfile.objects.select_related("user").order_by("user__username")
    if status:
        qs = qs.filter(status=status)
    if role:
        qs = qs.filter(role=role)
    return qs


class StaffAccessService:
    """
    Admin-driven changes to a colleague's role and sign-in access.

    Every change lands in the audit trail of the acting unit. Nobody can
    change their own profile through here.
    """

    @staticmethod
    def _guard(*, actor, profile: UserProfile) -> None:
        if profile.user_id == getattr(actor, "id", None):
            raise PermissionDenied(SELF_CHANGE_MSG)

    @staticmethod
    def _audit(*, event_code: str, profile: UserProfile, actor, unit: str, metadata: dict) -> None:
        AuditService.log(
            event_code=event_code,
            entity_type=ENTITY_TYPE,
            entity_id=profile.id,
            unit=unit,
            actor_user_id=getattr(actor, "id", None),
            metadata={"username": profile.user.get_username(), **metadata},
        )

    @staticmethod
    @transaction.atomic
    def change_role(*, actor, profile: UserProfile, role: str, unit: str) -> UserProfile:
        StaffAccessService._guard(actor=actor, profile=profile)
        if profile.user.is_superuser:
            raise ValidationError({"role": ["Superuser accounts are always Admin."]})

        previous = profile.role
        profile.role = role
        profile.save(update_fields=["role", "updated_at"])

        # role groups outrank the profile field, keep them in step
        user = profile.user
        user.groups.remove(*Group.objects.filter(name__in=StaffRole.values))
        group, _ = Group.objects.get_or_create(name=role)
        user.groups.add(group)

        logger.info("Role of %s changed %s -> %s", user.get_username(), previous, role)
        StaffAccessService._audit(
            event_code=EVENT_ROLE_CHANGED,
            profile=profile,
            actor=actor,
            unit=unit,
            metadata={"from": previous, "to": role},
        )
        return profile

    @staticmethod
    def _set_status(*, actor, profile: UserProfile, status: str, unit: str, event_code: str) -> UserProfile:
        StaffAccessService._guard(actor=actor, profile=profile)

        previous = profile.status
        if previous == status:
            return profile

        profile.status = status
        profile.save(update_fields=["status", "updated_at"])

        logger.info("Access of %s changed %s -> %s", profile.user.get_username(), previous, status)
        StaffAccessService._audit(
            event_code=event_code,
            profile=profile,
            actor=actor,
            unit=unit,
            metadata={"from": previous, "to": status},
        )
        return profile

    @staticmethod
    def revoke(*, actor, profile: UserProfile, unit: str) -> UserProfile:
        return StaffAccessService._set_status(
            actor=actor, profile=profile, status=StaffStatus.LEFT, unit=unit, event_code=EVENT_ACCESS_REVOKED
        )

    @staticmethod
    def restore(*, actor, profile: UserProfile, unit: str) -> UserProfile:
        return StaffAccessService._set_status(
            actor=actor, profile=profile, status=StaffStatus.ACTIVE, unit=unit, event_code=EVENT_ACCESS_RESTORED
        )
