# census_core/common/permissions.py

from __future__ import annotations

from rest_framework.permissions import SAFE_METHODS, BasePermission

from census_core.iam.models import StaffRole
from census_core.iam.roles import current_role

ROLE_ADMIN = StaffRole.ADMIN
ROLE_CONSULTANT = StaffRole.CONSULTANT
ROLE_STAFF = StaffRole.STAFF

ALL_ROLES = {ROLE_ADMIN, ROLE_CONSULTANT, ROLE_STAFF}
MANAGERS = {ROLE_ADMIN, ROLE_CONSULTANT}


class BaseRolePermission(BasePermission):
    """
    Base permission class for role-based access control.

    Key behavior:
    - Requires an authenticated user with a resolvable role.
    - ADMIN bypass.
    - Uses allowed_roles_per_action for strict RBAC.
    - If action is unknown and request is SAFE, fall back to list/retrieve
      instead of denying.
    """
    message = "You do not have permission to perform this action."

    # Override in subclasses: dict of action -> set of allowed roles
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        role = current_role(request.user)
        if role is None:
            return False

        if role == ROLE_ADMIN:
            return True

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            read_action = "retrieve" if ("pk" in kwargs or "id" in kwargs) else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        if allowed is not None:
            return role in allowed

        # Unknown action => deny by default
        return False

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class CensusPermission(BaseRolePermission):
    """Live census: everyone reads, Admin/Consultant write, Admin deletes."""
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "summary": ALL_ROLES,
        "export": ALL_ROLES,
        "consultants": ALL_ROLES,
        "create": MANAGERS,
        "update": MANAGERS,
        "partial_update": MANAGERS,
        "archive": MANAGERS,
        "destroy": {ROLE_ADMIN},
    }


class MortalityPermission(BaseRolePermission):
    """Mortality archive: same shape as the census."""
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "export": ALL_ROLES,
        "create": MANAGERS,
        "update": MANAGERS,
        "partial_update": MANAGERS,
        "destroy": {ROLE_ADMIN},
    }


class AuditPermission(BaseRolePermission):
    """Audit trail is Admin-only and read-only."""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN},
        "retrieve": {ROLE_ADMIN},
        "create": set(),
        "update": set(),
        "partial_update": set(),
        "destroy": set(),
    }


class StaffAdminPermission(BaseRolePermission):
    """Staff directory and access changes are Admin-only."""
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN},
        "role": {ROLE_ADMIN},
        "revoke": {ROLE_ADMIN},
        "restore": {ROLE_ADMIN},
    }
