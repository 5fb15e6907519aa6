"""Product service: validation, storage delegation and result shaping.

Each operation validates its input before touching storage, issues a single
repository call and translates an absent record into ProductNotFoundError.
The storage backend is selected by configuration (storage.backend).
"""

import logging
from typing import Any, Optional, Protocol

from ..clients import MongoDBClient
from ..config import AppConfig
from ..models import PRODUCT_FIELDS, Product
from .exceptions import ProductNotFoundError, ProductValidationError
from .product_repository import MongoProductRepository, SqliteProductRepository

logger = logging.getLogger(__name__)


class ProductRepository(Protocol):
    """Storage operations the product service relies on."""

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def insert(self, fields: dict[str, Any]) -> dict[str, Any]: ...

    async def find(self, search: Optional[str] = None) -> list[dict[str, Any]]: ...

    async def find_by_id(self, product_id: str) -> Optional[dict[str, Any]]: ...

    async def update_by_id(
        self, product_id: str, fields: dict[str, Any]
    ) -> Optional[dict[str, Any]]: ...

    async def delete_by_id(self, product_id: str) -> bool: ...


def name_sort_key(product: Product) -> tuple[str, str]:
    """Alphabetical ordering that ignores case first, then falls back to the raw name."""
    return (product.name.casefold(), product.name)


def _validate_name(value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise ProductValidationError("Product name is required and must be a non-empty string")


class ProductService:
    """Service for creating, querying, updating and deleting products."""

    def __init__(self, repository: ProductRepository):
        """Initialize the product service.

        Args:
            repository: Storage repository the service delegates to.
        """
        self._repository = repository

    async def connect(self) -> None:
        await self._repository.connect()

    async def close(self) -> None:
        await self._repository.close()

    async def __aenter__(self) -> "ProductService":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Async context manager exit with cleanup."""
        await self.close()
        return False

    async def create_product(self, data: dict[str, Any]) -> Product:
        """Create and persist a new product.

        Args:
            data: Product fields. ``name`` is required; unknown keys and any
                client-supplied ``id`` are ignored.

        Returns:
            The stored Product with its generated id.

        Raises:
            ProductValidationError: If ``name`` is missing or empty.
            StorageError: If the storage engine rejects the insert.
        """
        _validate_name(data.get("name"))

        fields = {field: data.get(field) for field in PRODUCT_FIELDS}

        stored = await self._repository.insert(fields)
        product = Product.from_document(stored)

        logger.info(f"Created product {product.id}: {product.name}")
        return product

    async def list_products(self, search: Optional[str] = None) -> list[Product]:
        """List products ordered by name.

        Args:
            search: Optional case-insensitive substring to match against names.
                An empty string behaves like no filter.

        Returns:
            Matching products sorted ascending by name (possibly empty).
        """
        documents = await self._repository.find(search or None)
        products = [Product.from_document(doc) for doc in documents]
        products.sort(key=name_sort_key)
        return products

    async def get_product(self, product_id: str) -> Product:
        """Fetch a product by id.

        Raises:
            ProductNotFoundError: If no product has that id.
        """
        document = await self._repository.find_by_id(product_id)
        if document is None:
            logger.debug(f"Product {product_id} not found")
            raise ProductNotFoundError(product_id)
        return Product.from_document(document)

    async def update_product(self, product_id: str, data: dict[str, Any]) -> Product:
        """Merge the supplied fields into an existing product.

        Only keys present in ``data`` are applied; omitted fields keep their
        stored values and the id never changes.

        Raises:
            ProductValidationError: If ``name`` is supplied but empty or null.
            ProductNotFoundError: If no product has that id.
        """
        fields = {field: data[field] for field in PRODUCT_FIELDS if field in data}
        if "name" in fields:
            _validate_name(fields["name"])

        document = await self._repository.update_by_id(product_id, fields)
        if document is None:
            logger.debug(f"Product {product_id} not found for update")
            raise ProductNotFoundError(product_id)

        logger.info(f"Updated product {product_id}: {sorted(fields)}")
        return Product.from_document(document)

    async def delete_product(self, product_id: str) -> None:
        """Delete a product by id.

        Raises:
            ProductNotFoundError: If no product has that id.
        """
        deleted = await self._repository.delete_by_id(product_id)
        if not deleted:
            logger.debug(f"Product {product_id} not found for delete")
            raise ProductNotFoundError(product_id)

        logger.info(f"Deleted product {product_id}")


def create_product_service(config: AppConfig) -> ProductService:
    """Build a ProductService for the configured storage backend.

    Raises:
        ValueError: If the configured backend is unknown or incomplete.
    """
    backend = config.storage.backend

    if backend == "sqlite":
        repository: ProductRepository = SqliteProductRepository(config.storage.sqlite_path)
    elif backend == "mongodb":
        if config.mongodb is None:
            raise ValueError("MongoDB backend selected but no mongodb configuration loaded")
        repository = MongoProductRepository(
            MongoDBClient(
                url=config.mongodb.url,
                database_name=config.mongodb.database_name,
                collection_name=config.mongodb.collection_name,
            )
        )
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    logger.info(f"Product service using {backend} backend")
    return ProductService(repository)
