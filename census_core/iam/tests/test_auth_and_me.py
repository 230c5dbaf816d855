# census_core/iam/tests/test_auth_and_me.py
import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from census_core.iam.models import StaffRole, StaffStatus

pytestmark = pytest.mark.django_db


def _login_payload(user, password="Pass@12345"):
    user.set_password(password)
    user.save(update_fields=["password"])
    field = user.USERNAME_FIELD
    return {field: getattr(user, field), "password": password}


def test_me_requires_auth():
    """
    Fresh APIClient, the api_client fixture is already authenticated.
    """
    c = APIClient()
    res = c.get("/api/me/")
    assert res.status_code in (401, 403)


def test_login_sets_cookies(user, settings):
    payload = _login_payload(user)

    res = APIClient().post("/api/auth/login/", payload, format="json")
    assert res.status_code == 200

    assert settings.SIMPLE_JWT["AUTH_COOKIE"] in res.cookies
    assert settings.SIMPLE_JWT["AUTH_COOKIE_REFRESH"] in res.cookies
    assert res.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]]["httponly"]


def test_cookie_session_reaches_me(user, settings):
    c = APIClient()
    assert c.post("/api/auth/login/", _login_payload(user), format="json").status_code == 200

    # APIClient keeps response cookies, so the access cookie authenticates
    res = c.get("/api/v1/me/")
    assert res.status_code == 200
    assert res.json()["user"]["id"] == user.id


def test_refresh_and_logout(user, settings):
    c = APIClient()
    c.post("/api/auth/login/", _login_payload(user), format="json")

    res = c.post("/api/auth/refresh/", {}, format="json")
    assert res.status_code == 200
    assert settings.SIMPLE_JWT["AUTH_COOKIE"] in res.cookies

    res = c.post("/api/auth/logout/", {}, format="json")
    assert res.status_code == 200
    assert res.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]].value == ""


def test_departed_staff_cannot_log_in(make_user):
    user = make_user(StaffRole.CONSULTANT, status=StaffStatus.LEFT)

    res = APIClient().post("/api/auth/login/", _login_payload(user), format="json")
    assert res.status_code in (401, 403)
    assert res.json()["error"]["code"] in ("authentication_failed", "user_left")


def test_departed_staff_token_is_refused(make_user):
    user = make_user(StaffRole.CONSULTANT)
    access = str(RefreshToken.for_user(user).access_token)
    user.census_profile.status = StaffStatus.LEFT
    user.census_profile.save(update_fields=["status"])

    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    res = c.get("/api/me/")
    assert res.status_code == 401


def test_me_returns_role_and_capabilities(consultant_client, consultant):
    res = consultant_client.get("/api/me/")
    assert res.status_code == 200

    body = res.json()
    assert body["user"]["id"] == consultant.id
    assert body["role"] == "Consultant"
    assert body["status"] == "Active"
    assert body["active_unit"] is None
    assert body["capabilities"] == {"is_admin": False, "can_manage_records": True}


def test_me_echoes_active_unit(staff_client):
    res = staff_client.get("/api/me/", HTTP_X_UNIT="HDU")
    assert res.status_code == 200
    assert res.json()["active_unit"] == "HDU"
    assert res.json()["capabilities"] == {"is_admin": False, "can_manage_records": False}


def test_me_rejects_unknown_unit(staff_client):
    res = staff_client.get("/api/me/", HTTP_X_UNIT="OPD")
    assert res.status_code == 400
