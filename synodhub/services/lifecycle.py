"""
Account lifecycle state machine and authorization gate.

States are pending, active and rejected:

    (none)   --self-register-->  pending
    (none)   --admin add------>  active
    pending  --approve-------->  active    (role/district overwritten, rejectionDate cleared)
    pending  --reject--------->  rejected  (rejectionDate = now)
    rejected --approve-------->  active
    rejected --reject--------->  rejected  (no-op)

Deletion is a hard removal from any state. The rejection grace period is
advisory only: nothing here deletes a user when it runs out.
"""

from datetime import datetime
from typing import Optional

from ..models.base import as_utc, utcnow
from ..models.user import User, UserRole, UserStatus
from ..utils.exceptions import InvalidTransition, PermissionDenied

GRACE_PERIOD_HOURS = 72


def new_registration(user: User) -> User:
    """Self-registered accounts always start pending"""
    return user.model_copy(update={"status": UserStatus.PENDING, "rejection_date": None})


def new_direct_add(user: User) -> User:
    """Admin-added accounts skip approval"""
    return user.model_copy(update={"status": UserStatus.ACTIVE, "rejection_date": None})


def approve(user: User, role: UserRole, district: Optional[str] = None) -> User:
    if user.status == UserStatus.ACTIVE:
        raise InvalidTransition(user.id, user.status.value, "approve")
    return user.model_copy(
        update={
            "status": UserStatus.ACTIVE,
            "role": UserRole(role),
            "district": district,
            "rejection_date": None,
        }
    )


def reject(user: User, now: Optional[datetime] = None) -> User:
    if user.status == UserStatus.REJECTED:
        return user
    if user.status == UserStatus.ACTIVE:
        raise InvalidTransition(user.id, user.status.value, "reject")
    return user.model_copy(
        update={"status": UserStatus.REJECTED, "rejection_date": now or utcnow()}
    )


def remaining_grace_hours(
    user: User,
    now: Optional[datetime] = None,
    grace_hours: float = GRACE_PERIOD_HOURS,
) -> float:
    """Hours left before a rejected account may be removed, floored at 0"""
    if not user.rejection_date:
        return 0.0
    now = as_utc(now or utcnow())
    elapsed = (now - as_utc(user.rejection_date)).total_seconds() / 3600
    return max(0.0, grace_hours - elapsed)


def grace_expired(
    user: User,
    now: Optional[datetime] = None,
    grace_hours: float = GRACE_PERIOD_HOURS,
) -> bool:
    return (
        user.status == UserStatus.REJECTED
        and user.rejection_date is not None
        and remaining_grace_hours(user, now, grace_hours) == 0
    )


def require_admin(actor: Optional[User], action: str) -> User:
    if actor is None or not actor.is_admin:
        raise PermissionDenied(f"An administrator role is required to {action}")
    return actor


def require_super_admin(actor: Optional[User], action: str) -> User:
    if actor is None or not actor.is_super_admin:
        raise PermissionDenied(f"SUPER_ADMIN is required to {action}")
    return actor
