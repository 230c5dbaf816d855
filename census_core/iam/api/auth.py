# census_core/iam/api/auth.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from census_core.iam.api.schema_serializers import (
    LoginRequestSerializer,
    LoginResponseSerializer,
    LogoutResponseSerializer,
    RefreshResponseSerializer,
)
from census_core.iam.roles import has_left


def _seconds(value: Any) -> int:
    """
    Convert a JWT lifetime setting into seconds.
    Supports timedelta OR int/float (already seconds).
    """
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    try:
        return int(value)
    except (TypeError, ValueError):
        # 0 means "session cookie"
        return 0


@dataclass(frozen=True)
class CookiePolicy:
    access_name: str
    refresh_name: str
    access_max_age: int
    refresh_max_age: int
    secure: bool
    samesite: str

    @classmethod
    def from_settings(cls) -> "CookiePolicy":
        jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
        return cls(
            access_name=jwt_cfg.get("AUTH_COOKIE", "census_access"),
            refresh_name=jwt_cfg.get("AUTH_COOKIE_REFRESH", "census_refresh"),
            access_max_age=_seconds(jwt_cfg.get("ACCESS_TOKEN_LIFETIME", timedelta(minutes=30))),
            refresh_max_age=_seconds(jwt_cfg.get("REFRESH_TOKEN_LIFETIME", timedelta(days=14))),
            secure=bool(jwt_cfg.get("AUTH_COOKIE_SECURE", False)),
            samesite=jwt_cfg.get("AUTH_COOKIE_SAMESITE", "Lax"),
        )

    def attach(self, response: Response, *, access: str, refresh: str) -> None:
        for name, value, max_age in (
            (self.access_name, access, self.access_max_age),
            (self.refresh_name, refresh, self.refresh_max_age),
        ):
            response.set_cookie(
                name,
                value,
                max_age=max_age,
                httponly=True,
                secure=self.secure,
                samesite=self.samesite,
                path="/",
            )

    def clear(self, response: Response) -> None:
        response.delete_cookie(self.access_name, path="/")
        response.delete_cookie(self.refresh_name, path="/")


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        request=LoginRequestSerializer,
        responses={200: LoginResponseSerializer},
        tags=["IAM"],
    )
    def post(self, request):
        serializer = TokenObtainPairSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if has_left(serializer.user):
            raise AuthenticationFailed("This account is no longer active.", code="user_left")

        access = serializer.validated_data["access"]
        refresh = serializer.validated_data["refresh"]

        res = Response({"detail": "login ok"}, status=status.HTTP_200_OK)
        CookiePolicy.from_settings().attach(res, access=access, refresh=refresh)
        return res


class RefreshView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        request=None,
        responses={200: RefreshResponseSerializer},
        tags=["IAM"],
    )
    def post(self, request):
        policy = CookiePolicy.from_settings()
        refresh = request.COOKIES.get(policy.refresh_name) or request.data.get("refresh")

        serializer = TokenRefreshSerializer(data={"refresh": refresh})
        serializer.is_valid(raise_exception=True)

        access = serializer.validated_data["access"]
        new_refresh = serializer.validated_data.get("refresh", refresh)

        res = Response({"detail": "refreshed"}, status=status.HTTP_200_OK)
        policy.attach(res, access=access, refresh=new_refresh)
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=None,
        responses={200: LogoutResponseSerializer},
        tags=["IAM"],
    )
    def post(self, request):
        res = Response({"detail": "logged out"}, status=status.HTTP_200_OK)
        CookiePolicy.from_settings().clear(res)
        return res
