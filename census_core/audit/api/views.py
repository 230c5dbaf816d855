# census_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from census_core.audit.api.serializers import AuditEventSerializer, AuditQuerySerializer
from census_core.audit.models import AuditEvent
from census_core.audit.selectors import list_audit_events
from census_core.common.permissions import AuditPermission
from census_core.common.scope import require_scope


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    Read-only audit trail for the unit in X-Unit (Admin only).
    """
    permission_classes = [AuditPermission]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        parameters=[AuditQuerySerializer],
        responses={200: AuditEventSerializer(many=True)},
    )
    def list(self, request):
        scope = require_scope(request)

        query = AuditQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = dict(query.validated_data)
        limit = params.pop("limit")

        events = list_audit_events(unit=scope.unit, **params)[:limit]
        return Response(AuditEventSerializer(events, many=True).data, status=status.HTTP_200_OK)
