"""
Entities package for the product catalog API.
Contains plain query structures passed between services and DAOs.
"""

from .product_query import ProductDefaults, ProductFilter, PageRequest

__all__ = ["ProductDefaults", "ProductFilter", "PageRequest"]
