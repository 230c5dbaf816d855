# census_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from census_core.admissions.api.views import CensusViewSet, MortalityViewSet
from census_core.audit.api.views import AuditEventViewSet
from census_core.iam.api.auth import LoginView, LogoutView, RefreshView
from census_core.iam.api.me import MeView
from census_core.iam.api.users import StaffUserViewSet

router = DefaultRouter()

router.register(r"census", CensusViewSet, basename="census")
router.register(r"mortality", MortalityViewSet, basename="mortality")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")
router.register(r"users", StaffUserViewSet, basename="users")

urlpatterns = [
    # Auth + /me
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
