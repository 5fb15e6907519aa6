"""Errors raised by the product service and its storage repositories."""


class ProductValidationError(Exception):
    """Raised when a product payload is missing a required field or has an invalid value."""
    pass


class ProductNotFoundError(Exception):
    """Raised when no product exists for the requested id."""

    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class StorageError(Exception):
    """Raised when the storage engine rejects or fails an operation.

    Attributes:
        status_code: HTTP status the failure should surface as. Engine-rejected
            input keeps the engine's 4xx status; everything else is 500.
    """

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code
