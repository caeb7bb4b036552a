"""User data models for authentication and the account lifecycle"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import Record, new_id


class UserRole(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    DISTRICT_ADMIN = "DISTRICT_ADMIN"
    LOCAL_ADMIN = "LOCAL_ADMIN"
    PASTOR = "PASTOR"
    STAFF = "STAFF"


class UserStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"


ADMIN_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.DISTRICT_ADMIN, UserRole.LOCAL_ADMIN})


class User(Record):
    """Identity plus lifecycle record. Email is the case-insensitive unique key."""
    id: str = Field(default_factory=new_id)
    name: str = ""
    email: str
    phone: Optional[str] = None
    role: UserRole = UserRole.PASTOR
    status: Optional[UserStatus] = None  # None is never treated as active
    district: Optional[str] = None
    location: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    meeting_time: Optional[str] = None
    avatar: Optional[str] = None
    password: Optional[str] = None
    last_login: Optional[datetime] = None
    rejection_date: Optional[datetime] = None  # set only on transition to rejected

    @property
    def email_key(self) -> str:
        return email_key(self.email)

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN


def email_key(email: Optional[str]) -> str:
    """Normalized email used for uniqueness checks and lookups"""
    return (email or "").strip().lower()
