import pytest
from django.contrib.auth.models import AnonymousUser

from community_hub.audit.models import AuditLog
from community_hub.users.models import ROLE_ADMIN
from community_hub.users.models import ROLE_USER
from community_hub.users.models import User
from community_hub.users.permissions import is_privileged
from tests.factories import create_user


@pytest.mark.django_db
def test_regular_user_role(user: User):
    assert user.role == ROLE_USER
    assert not is_privileged(user)
    assert user.name == user.username


@pytest.mark.django_db
def test_admin_group_is_privileged(privileged_user: User):
    assert privileged_user.role == ROLE_ADMIN
    assert is_privileged(privileged_user)


@pytest.mark.django_db
def test_staff_flag_is_privileged():
    staff = create_user("staffer")
    staff.is_staff = True
    staff.save(update_fields=["is_staff"])
    assert is_privileged(staff)


def test_anonymous_is_not_privileged():
    assert not is_privileged(AnonymousUser())
    assert not is_privileged(None)


@pytest.mark.django_db
def test_audit_log_create_with_actor(user: User):
    log = AuditLog.objects.create(action="test", actor=user, message="hello")
    assert log.id is not None
    assert log.actor == user
    assert str(log).startswith("[")
