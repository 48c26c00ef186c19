"""
Unit tests for query parsing helpers used by the product list endpoint.
"""

import pytest

from app.core.exceptions import ValidationError
from app.entities.product_query import (
    PageRequest,
    ProductDefaults,
    ProductFilter,
    parse_float_prefix,
    parse_int_prefix,
)
from app.services.product_service import name_tokens


def test_parse_int_prefix_reads_leading_digits():
    assert parse_int_prefix("3") == 3
    assert parse_int_prefix(" 12abc") == 12
    assert parse_int_prefix("abc") is None
    assert parse_int_prefix(None) is None


def test_parse_float_prefix_rejects_non_numbers():
    assert parse_float_prefix("10.5") == 10.5
    assert parse_float_prefix("20usd") == 20
    assert parse_float_prefix("cheap") is None
    assert parse_float_prefix("inf") is None


def test_page_request_defaults_and_offset():
    page = PageRequest.from_query(None, None)
    assert (page.page, page.limit, page.offset) == (1, 10, 0)

    page = PageRequest.from_query("3", "5")
    assert page.offset == 10
    assert page.total_pages(11) == 3
    assert page.total_pages(0) == 0


def test_page_request_invalid_values_fall_back():
    page = PageRequest.from_query("zero", "-4")
    assert page.page == 1
    assert page.limit == 10

    page = PageRequest.from_query("0", "100")
    assert page.page == 1
    assert page.limit == 100


def test_page_request_rejects_limit_above_maximum():
    with pytest.raises(ValidationError) as exc_info:
        PageRequest.from_query("1", "101")
    assert exc_info.value.status_code == 400


def test_filter_all_sentinel_means_no_filter():
    product_filter = ProductFilter.from_query(category="all", color="all")
    assert product_filter.category is None
    assert product_filter.color is None

    product_filter = ProductFilter.from_query(category="footwear", color="red")
    assert product_filter.category == "footwear"
    assert product_filter.color == "red"


def test_price_range_requires_both_bounds():
    assert ProductFilter.from_query(min_price="10").price_range is None
    assert ProductFilter.from_query(max_price="20").price_range is None
    assert ProductFilter.from_query(min_price="x", max_price="20").price_range is None
    assert ProductFilter.from_query(min_price="10", max_price="20").price_range == (10.0, 20.0)
    assert ProductFilter.from_query(min_price="0", max_price="5").price_range == (0.0, 5.0)


def test_product_defaults():
    defaults = ProductDefaults.from_settings()
    assert defaults.category == "general"
    assert defaults.price == 0
    assert defaults.quantity == 1


def test_name_tokens_drop_single_characters():
    assert name_tokens("Red Shoes Size 10") == ["Red", "Shoes", "Size", "10"]
    assert name_tokens("A b  C") == []
    assert name_tokens("Shoes shoes  X") == ["Shoes"]
