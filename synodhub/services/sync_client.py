"""
Sync client: one operation surface per entity, whatever the backend.

With a remote base URL, users, announcements and locations go to the remote
service (reads fall back to the local copy, writes propagate failures).
Departments, gallery, subscribers, campaigns and chats are local-only in
every mode. The base URL is fixed per instance; switching backends means
building a new client.
"""

import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..api.remote_client import RemoteServiceClient
from ..auth.passwords import prepare_password
from ..models.base import utcnow
from ..models.content import (
    Announcement,
    ChatMessage,
    ChurchLocation,
    Department,
    GalleryImage,
    NewsletterCampaign,
    Subscriber,
)
from ..models.user import User, UserRole, UserStatus, email_key
from ..utils.config import Settings
from ..utils.exceptions import DuplicateEmail, PermissionDenied, UserNotFound
from ..utils.logger import get_logger
from . import lifecycle
from .entity_store import (
    EntityStore,
    FallbackEntityStore,
    FallbackUserStore,
    LocalEntityStore,
    LocalUserStore,
    RemoteEntityStore,
    RemoteUserStore,
    UserStore,
)
from .local_store import LocalStore

logger = get_logger(__name__)


class SyncClient:
    """Routes every entity operation to the remote service or the local store"""

    def __init__(
        self,
        local_store: LocalStore,
        api_url: Optional[str] = None,
        remote: Optional[RemoteServiceClient] = None,
        grace_hours: float = lifecycle.GRACE_PERIOD_HOURS,
        hash_passwords: bool = False,
    ):
        self.local_store = local_store
        self.api_url = (api_url or "").strip() or None
        self.grace_hours = grace_hours
        self.hash_passwords = hash_passwords

        self.local_users = LocalUserStore(local_store, hash_passwords=hash_passwords)
        self.local_announcements = LocalEntityStore(local_store, "announcements", Announcement, prepend=True)
        self.local_locations = LocalEntityStore(local_store, "locations", ChurchLocation)

        self.users: UserStore
        self.announcements: EntityStore[Announcement]
        self.locations: EntityStore[ChurchLocation]

        if self.api_url:
            self.remote = remote or RemoteServiceClient(self.api_url)
            self.users = FallbackUserStore(RemoteUserStore(self.remote), self.local_users)
            self.announcements = FallbackEntityStore(
                RemoteEntityStore(
                    Announcement,
                    self.remote.get_announcements,
                    self.remote.create_announcement,
                    self.remote.delete_announcement,
                ),
                self.local_announcements,
                "announcements",
            )
            self.locations = FallbackEntityStore(
                RemoteEntityStore(ChurchLocation, self.remote.get_locations, self.remote.create_location),
                self.local_locations,
                "locations",
            )
        else:
            self.remote = None
            self.users = self.local_users
            self.announcements = self.local_announcements
            self.locations = self.local_locations

        # Local-only in every mode
        self.departments = LocalEntityStore(local_store, "departments", Department)
        self.gallery = LocalEntityStore(local_store, "gallery", GalleryImage)
        self.subscribers = LocalEntityStore(local_store, "subscribers", Subscriber, prepend=True)
        self.campaigns = LocalEntityStore(local_store, "campaigns", NewsletterCampaign, prepend=True)
        self.chats = LocalEntityStore(local_store, "chats", ChatMessage)

        logger.info("Sync client ready", mode="remote" if self.is_remote else "local", api_url=self.api_url)

    @classmethod
    def from_settings(cls, settings: Settings, local_store: Optional[LocalStore] = None) -> "SyncClient":
        store = local_store or LocalStore(settings.storage.data_dir, settings.storage.key_prefix)
        remote = None
        if settings.api_url:
            remote = RemoteServiceClient(
                settings.api_url,
                connection_timeout=settings.remote.connection_timeout,
                read_timeout=settings.remote.read_timeout,
            )
        return cls(
            store,
            api_url=settings.api_url,
            remote=remote,
            grace_hours=settings.accounts.rejection_grace_hours,
            hash_passwords=settings.security.hash_passwords,
        )

    @property
    def is_remote(self) -> bool:
        return self.api_url is not None

    @property
    def config(self) -> Dict[str, Any]:
        return {"api_url": self.api_url, "is_remote": self.is_remote}

    def _local_collection(self, name: str) -> LocalEntityStore:
        stores = {
            "departments": self.departments,
            "gallery": self.gallery,
            "subscribers": self.subscribers,
            "campaigns": self.campaigns,
            "chats": self.chats,
        }
        if not self.is_remote:
            stores.update(
                users=self.local_users,
                announcements=self.local_announcements,
                locations=self.local_locations,
            )
        if name not in stores:
            raise KeyError(f"Collection '{name}' is not stored locally in this mode")
        return stores[name]

    # Reads

    def list_users(self) -> List[User]:
        return self.users.list_all()

    def list_announcements(self) -> List[Announcement]:
        return self.announcements.list_all()

    def list_locations(self) -> List[ChurchLocation]:
        return self.locations.list_all()

    def get_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self.list_users() if u.id == user_id), None)

    # Account lifecycle

    def login(self, email: str, password: str) -> User:
        user = self.users.authenticate(email, password)
        logger.info("User authenticated", user_id=user.id, mode="remote" if self.is_remote else "local")
        return user

    def _check_email_available(self, email: str) -> None:
        key = email_key(email)
        if any(u.email_key == key for u in self.list_users()):
            raise DuplicateEmail(email)

    def register(
        self,
        name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        role: UserRole = UserRole.PASTOR,
        **extra: Any,
    ) -> User:
        """Self-registration. The new account is always pending."""
        user = User(name=name.strip(), email=email.strip(), password=password,
                    phone=phone, role=role, **extra)
        self._check_email_available(user.email)
        user = self.users.register(user)
        logger.info("User registered", user_id=user.id, status=UserStatus.PENDING.value)
        return user

    def add_user(
        self,
        actor: User,
        name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        role: UserRole = UserRole.PASTOR,
        district: Optional[str] = None,
        **extra: Any,
    ) -> User:
        """Administrator direct-add. The account is active immediately."""
        lifecycle.require_admin(actor, "add users")
        user = User(name=name.strip(), email=email.strip(), password=password, phone=phone,
                    role=role, district=district, **extra)
        self._check_email_available(user.email)
        user = self.users.create(lifecycle.new_direct_add(user))
        logger.info("User added by administrator", user_id=user.id, actor_id=actor.id)
        return user

    def approve_user(self, actor: User, user_id: str, role: UserRole, district: Optional[str] = None) -> None:
        lifecycle.require_admin(actor, "approve users")
        self.users.approve(user_id, role, district)
        logger.info("User approved", user_id=user_id, role=UserRole(role).value, actor_id=actor.id)

    def reject_user(self, actor: User, user_id: str) -> None:
        lifecycle.require_admin(actor, "reject users")
        self.users.reject(user_id)
        logger.info("User rejected", user_id=user_id, actor_id=actor.id)

    def delete_user(self, actor: User, user_id: str) -> None:
        lifecycle.require_admin(actor, "delete users")
        target = self.get_user(user_id)
        if target is not None and target.is_super_admin:
            raise PermissionDenied("SUPER_ADMIN accounts cannot be deleted")
        self.users.delete(user_id)
        logger.info("User deleted", user_id=user_id, actor_id=actor.id)

    def delete_all_users(self, actor: User) -> int:
        """
        Remove every non-SUPER_ADMIN user from the local store.

        Local-only in every mode: the remote service is never called.
        """
        lifecycle.require_admin(actor, "delete all users")
        users = self.local_users.list_all()
        remaining = [u for u in users if u.role == UserRole.SUPER_ADMIN]
        self.local_users.save_all(remaining)
        removed = len(users) - len(remaining)
        logger.warning("Bulk deleted users from local store", removed=removed, actor_id=actor.id)
        return removed

    def update_user(self, actor: User, user: User) -> User:
        """
        Profile update. Status and rejection date are kept from the stored record.

        Remote mode has no update endpoint, so nothing is persisted remotely.
        """
        current = self.get_user(user.id)
        if current is None:
            raise UserNotFound(user.id)
        if actor.id != user.id:
            lifecycle.require_admin(actor, "edit other users")
        if user.role != current.role:
            lifecycle.require_super_admin(actor, "change roles")
        password_changed = user.password != current.password
        if password_changed and actor.id != user.id:
            lifecycle.require_super_admin(actor, "reset passwords")

        updates: Dict[str, Any] = {"status": current.status, "rejection_date": current.rejection_date}
        if password_changed:
            updates["password"] = prepare_password(user.password, self.hash_passwords and not self.is_remote)
        updated = user.model_copy(update=updates)

        if self.is_remote:
            logger.warning("Profile update not persisted remotely", user_id=user.id)
        else:
            self.local_users.update(updated)
        return updated

    def reset_password(self, actor: User, user_id: str, new_password: str) -> User:
        lifecycle.require_super_admin(actor, "reset passwords")
        user = self.get_user(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return self.update_user(actor, user.model_copy(update={"password": new_password}))

    def remaining_grace_hours(self, user: User, now: Optional[datetime] = None) -> float:
        return lifecycle.remaining_grace_hours(user, now, self.grace_hours)

    def purge_expired_rejections(self, actor: User, now: Optional[datetime] = None) -> List[str]:
        """Explicitly delete rejected users whose grace period has run out"""
        lifecycle.require_admin(actor, "purge rejected users")
        expired = [
            u.id for u in self.list_users()
            if not u.is_super_admin and lifecycle.grace_expired(u, now, self.grace_hours)
        ]
        for user_id in expired:
            self.delete_user(actor, user_id)
        logger.info("Purged expired rejections", count=len(expired), actor_id=actor.id)
        return expired

    # Announcements and locations

    def create_announcement(self, announcement: Announcement) -> Announcement:
        return self.announcements.create(announcement)

    def delete_announcement(self, announcement_id: str) -> None:
        self.announcements.delete(announcement_id)

    def create_location(self, location: ChurchLocation) -> ChurchLocation:
        return self.locations.create(location)

    # Local-only collections

    def subscribe(self, email: str) -> Optional[Subscriber]:
        """Add a newsletter subscriber; returns None if already subscribed"""
        email = email.strip()
        if any(s.email == email for s in self.subscribers.list_all()):
            return None
        subscriber = Subscriber(email=email, date_joined=utcnow().date().isoformat())
        return self.subscribers.create(subscriber)

    def send_newsletter(self, subject: str, content: str) -> NewsletterCampaign:
        campaign = NewsletterCampaign(
            subject=subject,
            content=content,
            sent_date=utcnow().date().isoformat(),
            recipient_count=len(self.subscribers.list_all()),
            status="Sent",
        )
        return self.campaigns.create(campaign)

    def post_chat(self, user: User, content: str) -> ChatMessage:
        message = ChatMessage(
            user_id=user.id,
            user_name=user.name,
            content=content,
            timestamp=int(time.time() * 1000),
            role=user.role,
        )
        return self.chats.create(message)

    def save_gallery_item(self, item: GalleryImage) -> GalleryImage:
        return self.gallery.upsert(item)

    def clear(self, collection: str) -> None:
        self._local_collection(collection).clear()
        logger.warning("Cleared collection", collection=collection)

    # Store management

    def export_data(self) -> str:
        return self.local_store.export()

    def import_data(self, document: Any) -> int:
        return self.local_store.import_(document)

    def reset(self) -> None:
        self.local_store.reset()
