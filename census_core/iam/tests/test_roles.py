import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser, Group

from census_core.iam.models import StaffRole, StaffStatus, UserProfile
from census_core.iam.roles import can_manage_records, current_role, has_left, is_admin

pytestmark = pytest.mark.django_db


@pytest.fixture
def bare_user():
    return get_user_model().objects.create_user(username="plain", password="x")


def test_anonymous_has_no_role():
    assert current_role(AnonymousUser()) is None
    assert current_role(None) is None


def test_superuser_is_admin(bare_user):
    bare_user.is_superuser = True
    assert current_role(bare_user) == StaffRole.ADMIN


def test_group_wins_over_profile(bare_user):
    UserProfile.objects.create(user=bare_user, role=StaffRole.STAFF)
    bare_user.groups.add(Group.objects.create(name="Consultant"))
    assert current_role(bare_user) == StaffRole.CONSULTANT


def test_admin_group_outranks_others(bare_user):
    bare_user.groups.add(Group.objects.create(name="Staff"), Group.objects.create(name="Admin"))
    assert current_role(bare_user) == StaffRole.ADMIN


def test_profile_role_without_group(bare_user):
    UserProfile.objects.create(user=bare_user, role=StaffRole.CONSULTANT)
    assert current_role(bare_user) == StaffRole.CONSULTANT


def test_default_role_is_staff(bare_user):
    assert current_role(bare_user) == StaffRole.STAFF
    assert not has_left(bare_user)


def test_capability_flags():
    assert is_admin(StaffRole.ADMIN)
    assert not is_admin(StaffRole.CONSULTANT)
    assert can_manage_records(StaffRole.ADMIN)
    assert can_manage_records(StaffRole.CONSULTANT)
    assert not can_manage_records(StaffRole.STAFF)
    assert not can_manage_records(None)


def test_has_left(bare_user):
    UserProfile.objects.create(user=bare_user, status=StaffStatus.LEFT)
    assert has_left(bare_user)
