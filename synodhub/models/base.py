"""Shared base for persisted records"""

from datetime import datetime, timezone
from typing import Any, Dict
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Record(BaseModel):
    """
    Base for every stored record.

    Attributes are snake_case in Python and camelCase on the wire and on disk
    (``rejectionDate``, ``departmentId``...). Either spelling is accepted when
    parsing, and unknown fields from a remote server are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        """JSON-compatible dict with camelCase keys and unset optionals dropped"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
