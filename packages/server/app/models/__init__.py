# SQLModel definitions, imported here so the metadata is complete.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .user import User  # noqa: F401
