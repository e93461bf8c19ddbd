"""Menu data models.

These models represent rows of the `menu_categories` and `products` tables
held by the hosted data store, plus the nested view served on the public menu.
Row conversion lives on the models so that gateways only ever deal in dicts.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

CATEGORIES_COLLECTION = "menu_categories"
PRODUCTS_COLLECTION = "products"

# What `from_row` raises for a row missing a required column or holding a bad value
MALFORMED_ROW_ERRORS = (KeyError, TypeError, ValueError, InvalidOperation)

RowModel = TypeVar("RowModel", bound=BaseModel)


class Category(BaseModel):
    """Menu category model."""

    id: str = Field(..., description="Unique identifier for the category")
    name: str = Field(..., description="Category name")
    description: str | None = Field(None, description="Category description")
    display_order: int = Field(default=0, description="Ascending display position")
    is_active: bool = Field(default=True, description="Whether the category is on the public menu")
    created_at: datetime | None = Field(None, description="Creation timestamp set by the store")

    def to_row(self) -> dict[str, Any]:
        """Convert to a store row.

        Returns:
            dict: Row representation with store column names
        """
        row: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "display_order": self.display_order,
            "is_active": self.is_active,
        }

        if self.created_at is not None:
            row["created_at"] = self.created_at.isoformat()

        return row

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Category":
        """Create a Category from a store row.

        Nullable store columns are normalised: a missing display order sorts
        as 0 and a missing active flag counts as inactive.

        Args:
            row: Row dictionary as returned by a gateway

        Returns:
            Category: Parsed model instance
        """
        return cls(
            id=str(row["id"]),
            name=row["name"],
            description=row.get("description"),
            display_order=row.get("display_order") or 0,
            is_active=bool(row.get("is_active")),
            created_at=row.get("created_at"),
        )


class Product(BaseModel):
    """Menu product model."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier for the product")
    category_id: str = Field(..., description="Category this product is listed under")
    name: str = Field(..., description="Product name")
    description: str | None = Field(None, description="Product description")
    price: Decimal = Field(..., description="Product price", ge=0)
    image_url: str | None = Field(None, description="URL to product image")
    is_available: bool = Field(default=True, description="Whether the product can be ordered")
    display_order: int = Field(default=0, description="Ascending position within its category")
    created_at: datetime | None = Field(None, description="Creation timestamp set by the store")
    category_name: str | None = Field(
        None, description="Name of the owning category, filled in for admin listings"
    )

    def to_row(self) -> dict[str, Any]:
        """Convert to a store row.

        Returns:
            dict: Row representation with store column names
        """
        row: dict[str, Any] = {
            "id": self.id,
            "category_id": self.category_id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "image_url": self.image_url,
            "is_available": self.is_available,
            "display_order": self.display_order,
        }

        if self.created_at is not None:
            row["created_at"] = self.created_at.isoformat()

        return row

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Product":
        """Create a Product from a store row.

        Args:
            row: Row dictionary as returned by a gateway

        Returns:
            Product: Parsed model instance
        """
        is_available = row.get("is_available")
        return cls(
            id=str(row["id"]),
            category_id=str(row["category_id"]),
            name=row["name"],
            description=row.get("description"),
            # Convert through str so floats from JSON keep their printed value
            price=Decimal(str(row["price"])),
            image_url=row.get("image_url"),
            is_available=True if is_available is None else bool(is_available),
            display_order=row.get("display_order") or 0,
            created_at=row.get("created_at"),
        )


class MenuCategory(BaseModel):
    """An active category with its available products, as shown on the public menu."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str
    name: str
    description: str | None = None
    display_order: int = 0
    products: list[Product] = Field(default_factory=list)

    @classmethod
    def from_category(cls, category: Category, products: list[Product]) -> "MenuCategory":
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            display_order=category.display_order,
            products=products,
        )


def parse_rows(
    parse_row: Callable[[dict[str, Any]], RowModel], rows: list[dict[str, Any]], collection: str
) -> list[RowModel] | None:
    """Parse store rows, treating any malformed row as a failed read.

    Args:
        parse_row: Row parser, such as `Category.from_row`
        rows: Rows as returned by a gateway
        collection: Collection the rows came from, for logging

    Returns:
        Parsed models, or None if a row could not be parsed
    """
    try:
        return [parse_row(row) for row in rows]
    except MALFORMED_ROW_ERRORS as e:
        logger.error(f"Malformed row in {collection}: {e!r}")
        return None
