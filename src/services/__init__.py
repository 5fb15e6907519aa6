"""Product services and storage repositories."""

from src.services.exceptions import (
    ProductNotFoundError,
    ProductValidationError,
    StorageError,
)
from src.services.product_repository import (
    MongoProductRepository,
    SqliteProductRepository,
)
from src.services.product_service import (
    ProductService,
    create_product_service,
    name_sort_key,
)

__all__ = [
    "ProductNotFoundError",
    "ProductValidationError",
    "StorageError",
    "MongoProductRepository",
    "SqliteProductRepository",
    "ProductService",
    "create_product_service",
    "name_sort_key",
]
