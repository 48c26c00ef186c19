from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime, timezone
import uuid

from .user import AuthorEmail, UserSummary


class ProductBase(SQLModel):
    name: str = Field(index=True)
    description: str
    # Soft reference to users.id, dangling authors are tolerated
    author: str = Field(index=True)
    category: str = Field(default="general", index=True)
    color: Optional[str] = Field(default=None, index=True)
    price: float = Field(default=0)
    quantity: int = Field(default=1)


class Product(ProductBase, table=True):
    __tablename__ = "products"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    image: List[str] = Field(sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ProductCreate(SQLModel):
    """Create payload. Required fields are checked by the service so the
    error can name every missing one at once."""

    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[List[str]] = None
    author: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None


class ProductRead(ProductBase):
    id: str
    image: List[str]
    created_at: datetime
    updated_at: datetime


class ProductUpdate(SQLModel):
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[List[str]] = None
    author: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None


class ProductListItem(ProductRead):
    author: Optional[AuthorEmail] = None


class ProductDetail(ProductRead):
    author: Optional[UserSummary] = None
