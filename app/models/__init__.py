# Import all models for easy access
from .user import User, AuthorEmail, UserSummary
from .product import (
    Product, ProductCreate, ProductRead, ProductUpdate, ProductListItem, ProductDetail
)
from .review import Review, ReviewRead

__all__ = [
    "User", "AuthorEmail", "UserSummary",
    "Product", "ProductCreate", "ProductRead", "ProductUpdate", "ProductListItem", "ProductDetail",
    "Review", "ReviewRead",
]
