"""User model (Identity Store)."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    # Opaque id issued by the auth provider. Lookups also try the canonical
    # UUID rendering of a caller-supplied id, then legacy_id for migrated rows.
    id: str = Field(primary_key=True, index=True)
    legacy_id: Optional[str] = Field(default=None, index=True)

    name: Optional[str] = None
    email: Optional[str] = Field(default=None, unique=True, index=True)
    email_verified: bool = Field(default=False, nullable=False)
    password_hash: Optional[str] = None

    role: str = Field(default="user", nullable=False, index=True)  # user | org | admin
    # No foreign key: deactivating an org leaves member references as they are.
    organization_id: Optional[uuid.UUID] = Field(default=None, index=True)
