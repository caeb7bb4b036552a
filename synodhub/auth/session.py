"""
Session controller: startup load, session restore, login and logout.

The persisted session pointer is never trusted on its own. On every restore
it is looked up by id in the freshly fetched user list and only an active
account is restored; anything else clears the pointer.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional

from pydantic import ValidationError

from ..api.remote_client import RemoteServiceClient
from ..models.base import utcnow
from ..models.content import Announcement, ChurchLocation
from ..models.user import User, UserStatus
from ..services.sync_client import SyncClient
from ..utils.config import normalize_api_url
from ..utils.exceptions import PermissionDenied, SynodHubError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SessionController:
    """Owns the current user and the persisted session pointer"""

    def __init__(self, client: SyncClient):
        self.client = client
        self.current_user: Optional[User] = None
        self.users: List[User] = []
        self.announcements: List[Announcement] = []
        self.locations: List[ChurchLocation] = []

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    @property
    def is_admin(self) -> bool:
        return self.current_user is not None and self.current_user.is_admin

    @property
    def is_super_admin(self) -> bool:
        return self.current_user is not None and self.current_user.is_super_admin

    def refresh(self) -> None:
        """Fetch the three hybrid collections concurrently"""
        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="synodhub-load") as pool:
            users = pool.submit(self.client.list_users)
            announcements = pool.submit(self.client.list_announcements)
            locations = pool.submit(self.client.list_locations)
            self.users = users.result()
            self.announcements = announcements.result()
            self.locations = locations.result()

    def initialize(self) -> Optional[User]:
        """Load data, then restore the persisted session if it is still valid"""
        logger.info("Loading system data", mode="remote" if self.client.is_remote else "local")
        self.refresh()
        try:
            self.current_user = self._restore()
        except (SynodHubError, ValidationError, OSError) as e:
            logger.error("Session restore failed", error=str(e))
            self._clear_pointer()
            self.current_user = None
        return self.current_user

    def _restore(self) -> Optional[User]:
        stored = self.client.local_store.get_session()
        if not stored:
            return None

        stored_id = stored.get("id")
        source = next((u for u in self.users if u.id == stored_id), None)
        if source is None or source.status != UserStatus.ACTIVE:
            # Pending accounts are sent back to the login screen as well
            logger.info(
                "Persisted session no longer valid",
                user_id=stored_id,
                status=source.status.value if source and source.status else None,
            )
            self._clear_pointer()
            return None

        logger.info("Session restored", user_id=source.id)
        return source

    def _clear_pointer(self) -> None:
        self.client.local_store.set_session(None)

    def login(self, email: str, password: str) -> User:
        user = self.client.login(email, password)
        user = user.model_copy(update={"last_login": utcnow()})
        self.client.local_store.set_session(user.to_wire())
        self.current_user = user
        return user

    def logout(self) -> None:
        if self.current_user:
            logger.info("User logged out", user_id=self.current_user.id)
        self._clear_pointer()
        self.current_user = None

    def register(self, name: str, email: str, password: str, **fields: Any) -> User:
        """Register a pending account; never logs it in"""
        user = self.client.register(name, email, password, **fields)
        self.users = self.client.list_users()
        return user

    def update_profile(self, user: User) -> User:
        if self.current_user is None:
            raise PermissionDenied("Login required")
        updated = self.client.update_user(self.current_user, user)
        if updated.id == self.current_user.id:
            updated = updated.model_copy(update={"last_login": self.current_user.last_login})
            self.current_user = updated
            self.client.local_store.set_session(updated.to_wire())
        self.users = [updated if u.id == updated.id else u for u in self.users]
        return updated

    def switch_backend(self, api_url: Optional[str]) -> "SessionController":
        """
        Build a client for another backend and re-run initialization.

        The local store (and with it the session pointer) is shared, so the
        session is re-validated against the new backend's users.
        """
        url = normalize_api_url(api_url)
        old = self.client
        remote = None
        if url:
            connect, read = old.remote.timeout if old.remote else (10, 30)
            remote = RemoteServiceClient(url, connection_timeout=connect, read_timeout=read)
        client = SyncClient(
            old.local_store,
            api_url=url,
            remote=remote,
            grace_hours=old.grace_hours,
            hash_passwords=old.hash_passwords,
        )
        controller = SessionController(client)
        controller.initialize()
        return controller
