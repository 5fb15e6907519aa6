"""Data models module."""

from src.models.product import PRODUCT_FIELDS, Product

__all__ = ["PRODUCT_FIELDS", "Product"]
