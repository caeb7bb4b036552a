from unittest.mock import Mock

import pytest
import requests

from synodhub.api.remote_client import RemoteServiceClient
from synodhub.utils.exceptions import InvalidCredentials, RemoteUnavailable

BASE_URL = "http://sync.example.org/api"


def _response(status_code=200, body=None, bad_json=False):
    response = Mock()
    response.status_code = status_code
    if bad_json:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    session = Mock(spec=requests.Session)
    session.headers = {}
    session.request.return_value = _response(200, {"success": True})
    return session


@pytest.fixture
def api(session):
    return RemoteServiceClient(BASE_URL + "/", connection_timeout=3, read_timeout=7, session=session)


def _call(session):
    return session.request.call_args.kwargs


def test_json_content_type_and_timeout(api, session):
    session.request.return_value = _response(200, [])
    api.get_users()

    assert session.headers["Content-Type"] == "application/json"
    call = _call(session)
    assert call["method"] == "GET"
    assert call["url"] == f"{BASE_URL}/users"
    assert call["timeout"] == (3, 7)


@pytest.mark.parametrize(
    "invoke, method, path, body",
    [
        (lambda a: a.approve_user("u1", "PASTOR", "Mzimba"), "PUT", "/users/u1/approve",
         {"role": "PASTOR", "district": "Mzimba"}),
        (lambda a: a.reject_user("u1"), "PUT", "/users/u1/reject", None),
        (lambda a: a.delete_user("u1"), "DELETE", "/users/u1", None),
        (lambda a: a.create_announcement({"id": "a1", "title": "T"}), "POST", "/announcements",
         {"id": "a1", "title": "T"}),
        (lambda a: a.delete_announcement("a1"), "DELETE", "/announcements/a1", None),
        (lambda a: a.create_location({"id": "l1", "name": "N"}), "POST", "/locations",
         {"id": "l1", "name": "N"}),
    ],
)
def test_write_endpoints(api, session, invoke, method, path, body):
    invoke(api)
    call = _call(session)
    assert call["method"] == method
    assert call["url"] == BASE_URL + path
    assert call["json"] == body


def test_register_sends_partial_user(api, session):
    api.register({
        "id": "u1", "name": "N", "email": "a@x.org", "password": "pw", "phone": "1",
        "role": "PASTOR", "status": "pending", "district": "Mzimba",
    })
    call = _call(session)
    assert call["url"] == f"{BASE_URL}/register"
    assert call["json"] == {
        "id": "u1", "name": "N", "email": "a@x.org", "password": "pw", "phone": "1", "role": "PASTOR",
    }


def test_login_returns_user(api, session):
    session.request.return_value = _response(200, {"user": {"id": "u1", "email": "a@x.org"}})
    assert api.login("a@x.org", "pw") == {"id": "u1", "email": "a@x.org"}
    assert _call(session)["json"] == {"email": "a@x.org", "password": "pw"}


def test_login_non_2xx_is_invalid_credentials(api, session):
    session.request.return_value = _response(401, {"error": "Invalid"})
    with pytest.raises(InvalidCredentials):
        api.login("a@x.org", "wrong")


def test_login_network_error_stays_remote_unavailable(api, session):
    session.request.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(RemoteUnavailable):
        api.login("a@x.org", "pw")


def test_login_without_user_object_is_malformed(api, session):
    session.request.return_value = _response(200, {"ok": True})
    with pytest.raises(RemoteUnavailable):
        api.login("a@x.org", "pw")


def test_non_2xx_raises_with_status(api, session):
    session.request.return_value = _response(500)
    with pytest.raises(RemoteUnavailable) as exc_info:
        api.delete_user("u1")
    assert exc_info.value.status_code == 500


@pytest.mark.parametrize(
    "error",
    [requests.exceptions.ConnectionError("refused"), requests.exceptions.ReadTimeout("slow")],
)
def test_transport_errors_raise_remote_unavailable(api, session, error):
    session.request.side_effect = error
    with pytest.raises(RemoteUnavailable):
        api.get_announcements()


def test_list_endpoint_rejects_non_array(api, session):
    session.request.return_value = _response(200, {"users": []})
    with pytest.raises(RemoteUnavailable):
        api.get_users()


def test_list_endpoint_rejects_non_json(api, session):
    session.request.return_value = _response(200, bad_json=True)
    with pytest.raises(RemoteUnavailable):
        api.get_locations()


def test_no_retry_on_failure(api, session):
    session.request.return_value = _response(503)
    with pytest.raises(RemoteUnavailable):
        api.create_location({"id": "l1"})
    assert session.request.call_count == 1
