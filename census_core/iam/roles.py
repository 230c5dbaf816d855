# census_core/iam/roles.py
from __future__ import annotations

from census_core.iam.models import StaffRole, StaffStatus, UserProfile

MANAGING_ROLES = frozenset({StaffRole.ADMIN, StaffRole.CONSULTANT})


def _profile(user) -> UserProfile | None:
    try:
        return user.census_profile
    except (AttributeError, UserProfile.DoesNotExist):
        return None


def current_role(user) -> StaffRole | None:
    """
    Resolve the dashboard role for a user.

    Order:
      1) superuser -> Admin
      2) Django group named after a role (Admin wins over Consultant over Staff)
      3) UserProfile.role
      4) Staff for any other authenticated user
    Anonymous users have no role.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return None

    if getattr(user, "is_superuser", False):
        return StaffRole.ADMIN

    if hasattr(user, "groups"):
        group_names = set(user.groups.values_list("name", flat=True))
        for role in (StaffRole.ADMIN, StaffRole.CONSULTANT, StaffRole.STAFF):
            if role.value in group_names:
                return role

    profile = _profile(user)
    if profile is not None and profile.role:
        return StaffRole(profile.role)

    return StaffRole.STAFF


def is_admin(role) -> bool:
    return role == StaffRole.ADMIN


def can_manage_records(role) -> bool:
    return role in MANAGING_ROLES


def has_left(user) -> bool:
    profile = _profile(user)
    return profile is not None and profile.status == StaffStatus.LEFT
