"""Organization model. Soft-deleted by clearing ``is_active``."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Organization(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organizations"

    name: str = Field(nullable=False, index=True)
    description: Optional[str] = None
    is_active: bool = Field(default=True, nullable=False, index=True)
    created_by: Optional[str] = None  # admin user id, informational only
