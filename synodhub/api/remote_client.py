"""Client for the optional remote SynodHub HTTP service"""

from typing import Any, Dict, List, Optional

import requests

from ..utils.exceptions import InvalidCredentials, RemoteUnavailable
from ..utils.logger import get_logger

logger = get_logger(__name__)


class RemoteServiceClient:
    """
    Stateless request functions against a configurable base URL.

    One method per verb/path pair of the wire contract. Every failure
    (network error, timeout, non-2xx, malformed body) raises
    RemoteUnavailable; nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        connection_timeout: int = 10,
        read_timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        # Use tuple timeout: (connect_timeout, read_timeout)
        self.timeout = (connection_timeout, read_timeout)
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _make_request(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """
        Make an HTTP request to the remote service

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: Path below the base URL
            body: Optional JSON body

        Returns:
            The 2xx response

        Raises:
            RemoteUnavailable: On transport errors or a non-2xx status
        """
        url = f"{self.base_url}/{path.lstrip('/')}"

        try:
            logger.debug("Sending remote request", method=method, path=path)
            response = self.session.request(
                method=method,
                url=url,
                json=body,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error("Remote request timeout", method=method, path=path, timeout=self.timeout)
            raise RemoteUnavailable(f"Request timeout after {self.timeout} seconds: {str(e)}")
        except requests.exceptions.RequestException as e:
            logger.error("Remote request failed", method=method, path=path, error=str(e))
            raise RemoteUnavailable(f"Request failed: {str(e)}")

        logger.info(
            "Received remote response",
            method=method,
            path=path,
            status_code=response.status_code,
        )

        if not 200 <= response.status_code < 300:
            raise RemoteUnavailable(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    def _get_list(self, path: str) -> List[Dict[str, Any]]:
        response = self._make_request("GET", path)
        try:
            result = response.json()
        except ValueError as e:
            raise RemoteUnavailable(f"GET {path} returned a non-JSON body: {str(e)}")
        if not isinstance(result, list):
            raise RemoteUnavailable(f"GET {path} did not return an array")
        return result

    # Users

    def get_users(self) -> List[Dict[str, Any]]:
        return self._get_list("/users")

    def register(self, user: Dict[str, Any]) -> None:
        fields = ("id", "name", "email", "password", "phone", "role")
        self._make_request("POST", "/register", {k: user.get(k) for k in fields})

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Delegate the credential check; the returned identity is trusted"""
        try:
            response = self._make_request("POST", "/login", {"email": email, "password": password})
        except RemoteUnavailable as e:
            if e.status_code is not None:
                raise InvalidCredentials()
            raise

        try:
            result = response.json()
        except ValueError as e:
            raise RemoteUnavailable(f"POST /login returned a non-JSON body: {str(e)}")
        user = result.get("user") if isinstance(result, dict) else None
        if not isinstance(user, dict):
            raise RemoteUnavailable("POST /login response has no user object")
        return user

    def approve_user(self, user_id: str, role: str, district: Optional[str] = None) -> None:
        self._make_request("PUT", f"/users/{user_id}/approve", {"role": role, "district": district})

    def reject_user(self, user_id: str) -> None:
        self._make_request("PUT", f"/users/{user_id}/reject")

    def delete_user(self, user_id: str) -> None:
        self._make_request("DELETE", f"/users/{user_id}")

    # Announcements

    def get_announcements(self) -> List[Dict[str, Any]]:
        return self._get_list("/announcements")

    def create_announcement(self, announcement: Dict[str, Any]) -> None:
        self._make_request("POST", "/announcements", announcement)

    def delete_announcement(self, announcement_id: str) -> None:
        self._make_request("DELETE", f"/announcements/{announcement_id}")

    # Locations

    def get_locations(self) -> List[Dict[str, Any]]:
        return self._get_list("/locations")

    def create_location(self, location: Dict[str, Any]) -> None:
        self._make_request("POST", "/locations", location)
