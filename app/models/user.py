from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone
import uuid


class User(SQLModel, table=True):
    """Catalog-side view of identity provider users. Read-only here."""

    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    email: str = Field(nullable=False, unique=True, index=True)
    username: str = Field(nullable=False, index=True)
    role: str = Field(default="user", nullable=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)


class AuthorEmail(SQLModel):
    id: str
    email: str


class UserSummary(SQLModel):
    id: str
    email: str
    username: Optional[str] = None
