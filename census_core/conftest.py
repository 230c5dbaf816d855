# census_core/conftest.py
import itertools
from datetime import date

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from census_core.admissions.services import OperationContext
from census_core.admissions.store import DocumentStore
from census_core.iam.models import StaffRole, UserProfile

TODAY = date(2025, 3, 20)


@pytest.fixture
def unit():
    return "ICU"


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_user(db):
    """
    Create a user whose role comes from a Django group, with a matching profile.
      make_user("Consultant") -> user in the "Consultant" group
    """
    User = get_user_model()
    seq = itertools.count(1)

    def _make(role=StaffRole.ADMIN, *, username=None, **profile_fields):
        user = User.objects.create_user(
            username=username or f"{str(role).lower()}-{next(seq)}",
            password="testpass",
            is_active=True,
        )
        group, _ = Group.objects.get_or_create(name=str(role))
        user.groups.add(group)
        UserProfile.objects.create(user=user, role=role, **profile_fields)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user(StaffRole.ADMIN)


@pytest.fixture
def consultant(make_user):
    return make_user(StaffRole.CONSULTANT)


@pytest.fixture
def staff(make_user):
    return make_user(StaffRole.STAFF)


def _client_for(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def api_client(user):
    return _client_for(user)


@pytest.fixture
def consultant_client(consultant):
    return _client_for(consultant)


@pytest.fixture
def staff_client(staff):
    return _client_for(staff)


@pytest.fixture
def store(db):
    s = DocumentStore()
    yield s
    for sub in list(s._subscriptions):
        sub.close()


@pytest.fixture
def ctx(unit, today):
    return OperationContext(unit=unit, actor_role=StaffRole.CONSULTANT, actor_user_id=None, today=today)


@pytest.fixture
def admin_ctx(unit, today):
    return OperationContext(unit=unit, actor_role=StaffRole.ADMIN, actor_user_id=None, today=today)


@pytest.fixture
def staff_ctx(unit, today):
    return OperationContext(unit=unit, actor_role=StaffRole.STAFF, actor_user_id=None, today=today)


@pytest.fixture
def admission_data():
    return {
        "name": "  ayesha bibi ",
        "registration_number": "mr-1001",
        "gender": "Female",
        "category": "Medicine",
        "location": "WARD",
        "code_status": "Full Code",
        "consultant": "Dr. Ruqaya",
        "admission_date": date(2025, 3, 1),
    }
