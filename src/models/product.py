"""Product model for document storage representation."""

from dataclasses import dataclass
from typing import Any, Optional


PRODUCT_FIELDS = ("name", "description", "price")


@dataclass
class Product:
    """Product data model representing a stored product document."""

    id: str
    name: str
    description: Optional[str] = None
    price: Optional[float] = None

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Product":
        """Build a Product from a stored document, dropping storage system fields."""
        return cls(
            id=document["id"],
            name=document["name"],
            description=document.get("description"),
            price=document.get("price"),
        )
