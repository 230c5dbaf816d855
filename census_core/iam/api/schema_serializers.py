# census_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    # supports either username or email depending on the User model
    username = serializers.CharField(required=False)
    email = serializers.EmailField(required=False)
    password = serializers.CharField()


class LoginResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class RefreshResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class LogoutResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class MeUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField(allow_null=True, required=False)
    email = serializers.EmailField(allow_null=True, required=False)
    display_name = serializers.CharField(allow_blank=True)
    is_superuser = serializers.BooleanField()


class CapabilitiesSerializer(serializers.Serializer):
    is_admin = serializers.BooleanField()
    can_manage_records = serializers.BooleanField()


class MeResponseSerializer(serializers.Serializer):
    user = MeUserSerializer()
    role = serializers.CharField(allow_null=True)
    status = serializers.CharField()
    assigned_unit = serializers.CharField(allow_blank=True)
    active_unit = serializers.CharField(allow_null=True, required=False)
    capabilities = CapabilitiesSerializer()
