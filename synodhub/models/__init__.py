from .base import Record
from .content import (
    Announcement,
    ChatMessage,
    ChurchLocation,
    Department,
    GalleryImage,
    NewsletterCampaign,
    Subscriber,
)
from .user import ADMIN_ROLES, User, UserRole, UserStatus, email_key

__all__ = [
    "ADMIN_ROLES",
    "Announcement",
    "ChatMessage",
    "ChurchLocation",
    "Department",
    "GalleryImage",
    "NewsletterCampaign",
    "Record",
    "Subscriber",
    "User",
    "UserRole",
    "UserStatus",
    "email_key",
]
