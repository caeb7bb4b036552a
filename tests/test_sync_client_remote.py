import pytest

from synodhub.models.content import Announcement, ChurchLocation
from synodhub.models.user import UserRole, UserStatus
from synodhub.services.sync_client import SyncClient
from synodhub.utils.config import Settings
from synodhub.utils.exceptions import (
    DuplicateEmail,
    InvalidCredentials,
    PermissionDenied,
    RemoteUnavailable,
    UnsupportedOperation,
)


@pytest.fixture
def down_client(store, down_remote):
    return SyncClient(store, api_url="http://sync.example.org/api", remote=down_remote)


def test_remote_mode_config(remote_client):
    assert remote_client.config == {"api_url": "http://sync.example.org/api", "is_remote": True}


def test_reads_come_from_remote(remote_client, remote):
    remote.get_users.return_value = [{"id": "r1", "email": "remote@x.org", "status": "active"}]
    remote.get_locations.return_value = [{"id": "rl1", "name": "Remote Church", "adminId": "r1"}]

    assert [u.id for u in remote_client.list_users()] == ["r1"]
    assert [loc.admin_id for loc in remote_client.list_locations()] == ["r1"]


def test_reads_fall_back_to_local_when_remote_down(down_client):
    assert [u.id for u in down_client.list_users()] == ["sa_root"]
    assert len(down_client.list_announcements()) == 2
    assert len(down_client.list_locations()) == 6


def test_malformed_remote_list_falls_back_to_local(remote_client, remote):
    remote.get_users.return_value = [{"id": "r1"}]
    assert [u.id for u in remote_client.list_users()] == ["sa_root"]


def test_writes_propagate_remote_failure(down_client, store, super_admin):
    with pytest.raises(RemoteUnavailable):
        down_client.register("New", "new@x.org", "pw")
    with pytest.raises(RemoteUnavailable):
        down_client.approve_user(super_admin, "u1", UserRole.PASTOR)
    with pytest.raises(RemoteUnavailable):
        down_client.create_announcement(Announcement(title="Notice"))
    with pytest.raises(RemoteUnavailable):
        down_client.create_location(ChurchLocation(name="Chapel"))

    # Nothing is mirrored into the local store
    assert not store.has("users")
    assert not store.has("announcements")
    assert not store.has("locations")


def test_login_failure_does_not_fall_back(down_client):
    with pytest.raises(RemoteUnavailable):
        down_client.login("admin@ccap.org", "password123")


def test_remote_login(remote_client, remote):
    remote.login.return_value = {"id": "r1", "email": "a@x.org", "status": "active", "role": "PASTOR"}
    user = remote_client.login("a@x.org", "pw")
    assert user.id == "r1"
    remote.login.assert_called_once_with("a@x.org", "pw")


def test_remote_login_invalid_credentials(remote_client, remote):
    remote.login.side_effect = InvalidCredentials()
    with pytest.raises(InvalidCredentials):
        remote_client.login("a@x.org", "wrong")


def test_remote_login_pending_user_is_left_to_server(remote_client, remote):
    remote.login.return_value = {"id": "r1", "email": "a@x.org", "status": "pending"}
    user = remote_client.login("a@x.org", "pw")
    assert user.status == UserStatus.PENDING


def test_register_sends_pending_record(remote_client, remote, store):
    user = remote_client.register("New", " new@x.org ", "pw", phone="+265")

    body = remote.register.call_args.args[0]
    assert body["email"] == "new@x.org"
    assert body["status"] == "pending"
    assert user.status == UserStatus.PENDING
    assert not store.has("users")


def test_register_duplicate_checked_against_remote_list(remote_client, remote):
    remote.get_users.return_value = [{"id": "r1", "email": "Taken@x.org", "status": "active"}]
    with pytest.raises(DuplicateEmail):
        remote_client.register("New", "taken@X.org", "pw")
    remote.register.assert_not_called()


def test_add_user_registers_then_approves(remote_client, remote, super_admin):
    user = remote_client.add_user(super_admin, "Staff", "s@x.org", "pw",
                                  role=UserRole.STAFF, district="Karonga")

    assert remote.register.call_args.args[0]["status"] == "active"
    remote.approve_user.assert_called_once_with(user.id, "STAFF", "Karonga")


def test_lifecycle_calls_remote(remote_client, remote, super_admin):
    remote_client.approve_user(super_admin, "r1", UserRole.DISTRICT_ADMIN, "Mzimba")
    remote_client.reject_user(super_admin, "r2")
    remote_client.delete_user(super_admin, "r3")

    remote.approve_user.assert_called_once_with("r1", "DISTRICT_ADMIN", "Mzimba")
    remote.reject_user.assert_called_once_with("r2")
    remote.delete_user.assert_called_once_with("r3")


def test_delete_all_users_is_local_only(remote_client, remote, store, super_admin):
    store.save_all("users", [
        {"id": "sa_root", "email": "admin@ccap.org", "role": "SUPER_ADMIN", "status": "active"},
        {"id": "u1", "email": "a@x.org", "role": "PASTOR", "status": "active"},
    ])

    removed = remote_client.delete_all_users(super_admin)

    assert removed == 1
    assert [u["id"] for u in store.get_all("users")] == ["sa_root"]
    remote.delete_user.assert_not_called()
    remote.get_users.assert_not_called()


def test_local_only_collections_stay_local(remote_client, remote, store, super_admin):
    remote_client.subscribe("reader@x.org")
    remote_client.send_newsletter("News", "Body")
    remote_client.post_chat(super_admin, "Hi")
    remote_client.departments.delete("Finance")

    assert store.has("subscribers")
    assert store.has("campaigns")
    assert store.has("chats")
    assert store.has("departments")
    assert remote.method_calls == []


def test_hybrid_collections_cannot_be_cleared_locally_in_remote_mode(remote_client):
    with pytest.raises(KeyError):
        remote_client.clear("users")
    remote_client.clear("gallery")


def test_remote_location_delete_is_unsupported(remote_client):
    with pytest.raises(UnsupportedOperation):
        remote_client.locations.delete("l1")


def test_remote_update_is_unsupported(remote_client, super_admin):
    with pytest.raises(UnsupportedOperation):
        remote_client.users.update(super_admin)


def test_update_user_not_persisted_in_remote_mode(remote_client, remote, store, super_admin):
    remote.get_users.return_value = [{"id": "r1", "email": "r@x.org", "status": "active", "role": "PASTOR"}]
    target = remote_client.get_user("r1")

    updated = remote_client.update_user(super_admin, target.model_copy(update={"phone": "+265"}))

    assert updated.phone == "+265"
    assert not store.has("users")


def test_from_settings_picks_mode(store):
    local = Settings()
    remote = Settings(remote={"api_url": "https://sync.example.org/api", "read_timeout": 5})

    assert not SyncClient.from_settings(local, store).is_remote
    client = SyncClient.from_settings(remote, store)
    assert client.is_remote
    assert client.remote.timeout == (10, 5)


def test_remote_super_admin_cannot_be_deleted(remote_client, remote, local_admin):
    remote.get_users.return_value = [{"id": "r1", "email": "root@x.org", "status": "active", "role": "SUPER_ADMIN"}]

    with pytest.raises(PermissionDenied):
        remote_client.delete_user(local_admin, "r1")
    remote.delete_user.assert_not_called()
