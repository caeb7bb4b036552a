"""
Entity stores: one capability interface, two backends and a fallback wrapper.

- LocalEntityStore / LocalUserStore persist through LocalStore.
- RemoteEntityStore / RemoteUserStore call the remote HTTP service.
- FallbackEntityStore / FallbackUserStore route writes to the remote primary
  (failures propagate) and serve reads from it, falling back to the local
  copy whenever the remote read fails.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import ValidationError

from ..api.remote_client import RemoteServiceClient
from ..auth.passwords import prepare_password, verify_password
from ..models.base import Record
from ..models.user import User, UserRole, UserStatus, email_key
from ..utils.exceptions import (
    AccountPending,
    AccountRejected,
    DuplicateEmail,
    InvalidCredentials,
    RemoteUnavailable,
    UnsupportedOperation,
    UserNotFound,
)
from ..utils.logger import get_logger
from . import lifecycle
from .local_store import LocalStore

logger = get_logger(__name__)

T = TypeVar("T", bound=Record)


class EntityStore(ABC, Generic[T]):
    """Read-all / create / update / delete for one entity collection"""

    @abstractmethod
    def list_all(self) -> List[T]:
        ...

    @abstractmethod
    def create(self, record: T) -> T:
        ...

    @abstractmethod
    def update(self, record: T) -> T:
        ...

    @abstractmethod
    def delete(self, record_id: str) -> None:
        ...


class UserStore(EntityStore[User]):
    """Entity store with the account lifecycle operations"""

    @abstractmethod
    def authenticate(self, email: str, password: str) -> User:
        ...

    @abstractmethod
    def register(self, user: User) -> User:
        ...

    @abstractmethod
    def approve(self, user_id: str, role: UserRole, district: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def reject(self, user_id: str) -> None:
        ...


class LocalEntityStore(EntityStore[T]):
    """Collection persisted in the local store; every mutation saves in the same call"""

    def __init__(self, store: LocalStore, collection: str, model: Type[T], prepend: bool = False):
        self.store = store
        self.collection = collection
        self.model = model
        self.prepend = prepend

    def _load(self) -> List[T]:
        records = []
        for i, item in enumerate(self.store.get_all(self.collection)):
            try:
                records.append(self.model.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "Skipping invalid stored record",
                    collection=self.collection,
                    index=i,
                    error=str(e),
                )
        return records

    def _save(self, records: List[T]) -> None:
        self.store.save_all(self.collection, [r.to_wire() for r in records])

    def _not_found(self, record_id: str) -> Exception:
        return KeyError(f"{self.collection} record '{record_id}' not found")

    def list_all(self) -> List[T]:
        return self._load()

    def get(self, record_id: str) -> Optional[T]:
        return next((r for r in self._load() if r.id == record_id), None)

    def create(self, record: T) -> T:
        records = self._load()
        records = [record] + records if self.prepend else records + [record]
        self._save(records)
        return record

    def update(self, record: T) -> T:
        records = self._load()
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                self._save(records)
                return record
        raise self._not_found(record.id)

    def upsert(self, record: T) -> T:
        records = self._load()
        if any(r.id == record.id for r in records):
            records = [record if r.id == record.id else r for r in records]
        else:
            records.append(record)
        self._save(records)
        return record

    def delete(self, record_id: str) -> None:
        records = self._load()
        self._save([r for r in records if r.id != record_id])

    def save_all(self, records: List[T]) -> None:
        self._save(records)

    def clear(self) -> None:
        self._save([])


class LocalUserStore(LocalEntityStore[User], UserStore):
    """Users collection with the local credential check and state machine"""

    def __init__(self, store: LocalStore, hash_passwords: bool = False):
        super().__init__(store, "users", User)
        self.hash_passwords = hash_passwords

    def _not_found(self, record_id: str) -> Exception:
        return UserNotFound(record_id)

    def find_by_email(self, email: str) -> Optional[User]:
        key = email_key(email)
        return next((u for u in self._load() if u.email_key == key), None)

    def authenticate(self, email: str, password: str) -> User:
        user = self.find_by_email(email)
        if not user or not verify_password(password, user.password):
            raise InvalidCredentials()
        if user.status == UserStatus.PENDING:
            raise AccountPending()
        if user.status == UserStatus.REJECTED:
            raise AccountRejected()
        if user.status != UserStatus.ACTIVE:
            raise InvalidCredentials()
        return user

    def create(self, user: User) -> User:
        users = self._load()
        if any(u.email_key == user.email_key for u in users):
            raise DuplicateEmail(user.email)
        user = user.model_copy(update={"password": prepare_password(user.password, self.hash_passwords)})
        self._save(users + [user])
        return user

    def register(self, user: User) -> User:
        return self.create(lifecycle.new_registration(user))

    def _transition(self, user_id: str, change: Callable[[User], User]) -> User:
        users = self._load()
        for i, user in enumerate(users):
            if user.id == user_id:
                users[i] = change(user)
                self._save(users)
                return users[i]
        raise UserNotFound(user_id)

    def approve(self, user_id: str, role: UserRole, district: Optional[str] = None) -> None:
        self._transition(user_id, lambda u: lifecycle.approve(u, role, district))

    def reject(self, user_id: str) -> None:
        self._transition(user_id, lifecycle.reject)


class RemoteEntityStore(EntityStore[T]):
    """Collection served by the remote HTTP service"""

    def __init__(
        self,
        model: Type[T],
        fetch: Callable[[], List[Dict[str, Any]]],
        send: Callable[[Dict[str, Any]], None],
        remove: Optional[Callable[[str], None]] = None,
    ):
        self.model = model
        self._fetch = fetch
        self._send = send
        self._remove = remove

    def _parse(self, items: List[Dict[str, Any]]) -> List[T]:
        try:
            return [self.model.model_validate(item) for item in items]
        except ValidationError as e:
            raise RemoteUnavailable(f"Malformed {self.model.__name__} record from remote: {str(e)}")

    def list_all(self) -> List[T]:
        return self._parse(self._fetch())

    def create(self, record: T) -> T:
        self._send(record.to_wire())
        return record

    def update(self, record: T) -> T:
        raise UnsupportedOperation("update", self.model.__name__)

    def delete(self, record_id: str) -> None:
        if self._remove is None:
            raise UnsupportedOperation("delete", self.model.__name__)
        self._remove(record_id)


class RemoteUserStore(RemoteEntityStore[User], UserStore):
    def __init__(self, client: RemoteServiceClient):
        super().__init__(User, client.get_users, client.register, client.delete_user)
        self.client = client

    def authenticate(self, email: str, password: str) -> User:
        data = self.client.login(email, password)
        try:
            return User.model_validate(data)
        except ValidationError as e:
            raise RemoteUnavailable(f"Malformed user returned by login: {str(e)}")

    def register(self, user: User) -> User:
        user = lifecycle.new_registration(user)
        self.client.register(user.to_wire())
        return user

    def create(self, user: User) -> User:
        # No direct-add endpoint: register, then approve when the record is active
        self.client.register(user.to_wire())
        if user.status == UserStatus.ACTIVE:
            self.client.approve_user(user.id, user.role.value, user.district)
        return user

    def approve(self, user_id: str, role: UserRole, district: Optional[str] = None) -> None:
        self.client.approve_user(user_id, UserRole(role).value, district)

    def reject(self, user_id: str) -> None:
        self.client.reject_user(user_id)


class FallbackEntityStore(EntityStore[T]):
    """Remote primary with the local store as a read-only fallback"""

    def __init__(self, primary: EntityStore[T], fallback: EntityStore[T], name: str):
        self.primary = primary
        self.fallback = fallback
        self.name = name

    def list_all(self) -> List[T]:
        try:
            return self.primary.list_all()
        except RemoteUnavailable as e:
            logger.error("Remote read failed, falling back to local", entity=self.name, error=str(e))
            return self.fallback.list_all()

    def create(self, record: T) -> T:
        return self.primary.create(record)

    def update(self, record: T) -> T:
        return self.primary.update(record)

    def delete(self, record_id: str) -> None:
        self.primary.delete(record_id)


class FallbackUserStore(FallbackEntityStore[User], UserStore):
    def __init__(self, primary: UserStore, fallback: UserStore):
        super().__init__(primary, fallback, "users")

    def authenticate(self, email: str, password: str) -> User:
        return self.primary.authenticate(email, password)

    def register(self, user: User) -> User:
        return self.primary.register(user)

    def approve(self, user_id: str, role: UserRole, district: Optional[str] = None) -> None:
        self.primary.approve(user_id, role, district)

    def reject(self, user_id: str) -> None:
        self.primary.reject(user_id)
