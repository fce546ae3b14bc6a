import pytest

from community_hub.users.models import User
from tests.factories import api_client_for
from tests.factories import create_user


@pytest.fixture(autouse=True)
def _media_storage(settings, tmpdir) -> None:
    settings.MEDIA_ROOT = tmpdir.strpath


@pytest.fixture
def user(db) -> User:
    return create_user("member")


@pytest.fixture
def privileged_user(db) -> User:
    return create_user("operator", privileged=True)


@pytest.fixture
def api_client(user):
    return api_client_for(user)
