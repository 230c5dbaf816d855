# census_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from census_core.common.scope import resolve_scope
from census_core.iam.api.schema_serializers import MeResponseSerializer
from census_core.iam.models import StaffStatus
from census_core.iam.roles import can_manage_records, current_role, is_admin


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        """
        Returns user info, the resolved role and capability flags.
        The X-Unit header is OPTIONAL here; when provided it must name a known unit.
        """
        scope = resolve_scope(request)
        user = request.user
        role = current_role(user)
        profile = getattr(user, "census_profile", None)

        full_name = user.get_full_name() if hasattr(user, "get_full_name") else ""

        return Response(
            {
                "user": {
                    "id": user.id,
                    "username": getattr(user, "username", None),
                    "email": getattr(user, "email", None) or None,
                    "display_name": full_name or getattr(user, "username", "") or "",
                    "is_superuser": bool(getattr(user, "is_superuser", False)),
                },
                "role": role.value if role else None,
                "status": profile.status if profile else StaffStatus.ACTIVE.value,
                "assigned_unit": profile.assigned_unit if profile else "",
                "active_unit": scope.unit if scope else None,
                "capabilities": {
                    "is_admin": is_admin(role),
                    "can_manage_records": can_manage_records(role),
                },
            },
            status=status.HTTP_200_OK,
        )
