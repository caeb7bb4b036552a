from unittest.mock import Mock

import pytest

from synodhub.api.remote_client import RemoteServiceClient
from synodhub.models.user import User, UserRole, UserStatus
from synodhub.services.local_store import LocalStore
from synodhub.services.sync_client import SyncClient
from synodhub.utils.exceptions import RemoteUnavailable


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "data", key_prefix="test")


@pytest.fixture
def client(store):
    return SyncClient(store)


@pytest.fixture
def super_admin(client):
    return client.login("admin@ccap.org", "password123")


@pytest.fixture
def local_admin():
    return User(id="la1", name="Local Admin", email="local@ccap.org",
                role=UserRole.LOCAL_ADMIN, status=UserStatus.ACTIVE)


@pytest.fixture
def pastor():
    return User(id="p1", name="Pastor", email="pastor@ccap.org",
                role=UserRole.PASTOR, status=UserStatus.ACTIVE)


@pytest.fixture
def remote():
    """Remote adapter double; every call succeeds with empty results"""
    mock = Mock(spec=RemoteServiceClient)
    mock.timeout = (10, 30)
    mock.get_users.return_value = []
    mock.get_announcements.return_value = []
    mock.get_locations.return_value = []
    return mock


@pytest.fixture
def down_remote(remote):
    """Remote adapter double whose every call fails"""
    error = RemoteUnavailable("connection refused")
    for name in (
        "get_users", "register", "login", "approve_user", "reject_user", "delete_user",
        "get_announcements", "create_announcement", "delete_announcement",
        "get_locations", "create_location",
    ):
        getattr(remote, name).side_effect = error
    return remote


@pytest.fixture
def remote_client(store, remote):
    return SyncClient(store, api_url="http://sync.example.org/api", remote=remote)
