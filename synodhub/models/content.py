"""Simple owned records: announcements, locations, gallery, newsletter, chat, departments"""

from typing import Literal, Optional

from pydantic import Field

from .base import Record, new_id
from .user import UserRole


class Announcement(Record):
    id: str = Field(default_factory=new_id)
    department_id: str = ""
    title: str
    message: str = ""
    meeting_time: Optional[str] = None
    author: str = ""
    date: str = ""  # YYYY-MM-DD


class ChurchLocation(Record):
    id: str = Field(default_factory=new_id)
    name: str
    district: str = ""
    admin_id: str = "system"
    address: str = ""


class GalleryImage(Record):
    id: str = Field(default_factory=new_id)
    url: str
    caption: str = ""
    category: str = ""


class Subscriber(Record):
    id: str = Field(default_factory=new_id)
    email: str
    date_joined: str = ""


class NewsletterCampaign(Record):
    id: str = Field(default_factory=new_id)
    subject: str
    content: str = ""
    sent_date: str = ""
    recipient_count: int = 0
    status: Literal["Sent", "Draft"] = "Draft"


class ChatMessage(Record):
    id: str = Field(default_factory=new_id)
    user_id: str
    user_name: str = ""
    content: str
    timestamp: int  # epoch milliseconds
    role: UserRole = UserRole.STAFF


class Department(Record):
    """Departments are referenced by id from users; deleting one does not cascade."""
    id: str = Field(default_factory=new_id)
    name: str
    head: str = ""
    description: str = ""
