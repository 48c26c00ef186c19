from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone
import uuid

from .user import UserSummary


class ReviewBase(SQLModel):
    # Both references are by value; products own reviews only for lifecycle
    product_id: str = Field(index=True)
    user_id: str = Field(index=True)
    comment: str
    rating: int = Field(default=5, ge=1, le=5)


class Review(ReviewBase, table=True):
    __tablename__ = "reviews"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ReviewRead(ReviewBase):
    id: str
    created_at: datetime
    user: Optional[UserSummary] = None
