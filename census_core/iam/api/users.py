# census_core/iam/api/users.py
from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from census_core.common.permissions import StaffAdminPermission
from census_core.common.scope import require_scope
from census_core.iam.models import StaffRole, StaffStatus, UserProfile
from census_core.iam.services.staff import StaffAccessService, list_staff_profiles

UUID_LOOKUP = r"[0-9a-fA-F-]{36}"


class StaffProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(source="user.username", read_only=True)
    display_name = serializers.SerializerMethodField()

    class Meta:
        model = UserProfile
        fields = ["id", "user_id", "username", "display_name", "role", "status", "assigned_unit"]
        read_only_fields = fields

    def get_display_name(self, obj) -> str:
        return obj.user.get_full_name() or obj.user.get_username()


class StaffQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=StaffRole.choices, required=False)
    status = serializers.ChoiceField(choices=StaffStatus.choices, required=False)


class RoleChangeSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=StaffRole.choices)


class StaffUserViewSet(viewsets.GenericViewSet):
    """
    Admin staff directory: change roles, revoke and restore sign-in access.
    Changes are audited under the unit in X-Unit.
    """
    permission_classes = [StaffAdminPermission]
    requires_unit = True
    lookup_value_regex = UUID_LOOKUP

    serializer_class = StaffProfileSerializer
    queryset = UserProfile.objects.none()

    def _profile(self, pk) -> UserProfile:
        return get_object_or_404(UserProfile.objects.select_related("user"), pk=pk)

    @extend_schema(tags=["IAM"], parameters=[StaffQuerySerializer], responses={200: StaffProfileSerializer(many=True)})
    def list(self, request):
        require_scope(request)
        query = StaffQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        profiles = list_staff_profiles(**query.validated_data)
        return Response(StaffProfileSerializer(profiles, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["IAM"], request=RoleChangeSerializer, responses={200: StaffProfileSerializer})
    @action(detail=True, methods=["patch"], url_path="role")
    def role(self, request, pk=None):
        scope = require_scope(request)
        ser = RoleChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        profile = StaffAccessService.change_role(
            actor=request.user,
            profile=self._profile(pk),
            role=ser.validated_data["role"],
            unit=scope.unit,
        )
        return Response(StaffProfileSerializer(profile).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["IAM"], request=None, responses={200: StaffProfileSerializer})
    @action(detail=True, methods=["post"], url_path="revoke")
    def revoke(self, request, pk=None):
        scope = require_scope(request)
        profile = StaffAccessService.revoke(actor=request.user, profile=self._profile(pk), unit=scope.unit)
        return Response(StaffProfileSerializer(profile).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["IAM"], request=None, responses={200: StaffProfileSerializer})
    @action(detail=True, methods=["post"], url_path="restore")
    def restore(self, request, pk=None):
        scope = require_scope(request)
        profile = StaffAccessService.restore(actor=request.user, profile=self._profile(pk), unit=scope.unit)
        return Response(StaffProfileSerializer(profile).data, status=status.HTTP_200_OK)
