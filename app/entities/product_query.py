"""
Query structures for the product catalog.

The list endpoint receives raw query strings; these dataclasses turn them
into an explicit filter and page request before anything reaches the DAO.
"""

import math
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from app.core.config import settings
from app.core.exceptions import ValidationError

ALL_SENTINEL = "all"

_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_int_prefix(raw: Optional[str]) -> Optional[int]:
    """Parse the leading integer of ``raw`` ("12abc" -> 12), or None."""
    if raw is None:
        return None
    match = _INT_PREFIX.match(str(raw))
    return int(match.group()) if match else None


def parse_float_prefix(raw: Optional[str]) -> Optional[float]:
    """Parse the leading finite number of ``raw``, or None."""
    if raw is None:
        return None
    match = _FLOAT_PREFIX.match(str(raw))
    if not match:
        return None
    value = float(match.group())
    return value if math.isfinite(value) else None


@dataclass
class ProductDefaults:
    """Values assigned to optional product fields at creation."""
    category: str = "general"
    price: float = 0
    quantity: int = 1

    @classmethod
    def from_settings(cls) -> "ProductDefaults":
        return cls(
            category=settings.default_category,
            price=settings.default_price,
            quantity=settings.default_quantity,
        )


@dataclass
class ProductFilter:
    category: Optional[str] = None
    color: Optional[str] = None
    price_range: Optional[Tuple[float, float]] = None

    @classmethod
    def from_query(
        cls,
        category: Optional[str] = None,
        color: Optional[str] = None,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
    ) -> "ProductFilter":
        price_range = None
        # Both bounds are needed, a lone bound is ignored
        if min_price and max_price:
            low = parse_float_prefix(min_price)
            high = parse_float_prefix(max_price)
            if low is not None and high is not None:
                price_range = (low, high)

        return cls(
            category=category if category and category != ALL_SENTINEL else None,
            color=color if color and color != ALL_SENTINEL else None,
            price_range=price_range,
        )


@dataclass
class PageRequest:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total: int) -> int:
        return math.ceil(total / self.limit)

    @classmethod
    def from_query(cls, page: Optional[str] = None, limit: Optional[str] = None) -> "PageRequest":
        parsed_page = parse_int_prefix(page)
        parsed_limit = parse_int_prefix(limit)
        if parsed_page is None or parsed_page < 1:
            parsed_page = 1
        if parsed_limit is None or parsed_limit < 1:
            parsed_limit = settings.default_page_size
        if parsed_limit > settings.max_page_size:
            raise ValidationError(f"limit must not exceed {settings.max_page_size}")
        return cls(page=parsed_page, limit=parsed_limit)
