"""Shared pytest fixtures and configuration for all tests."""

import os
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

# Entry-point modules build the real application at import unless told otherwise
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402

from storefront_service.gateways.base_gateway import OrderBy, TableGateway  # noqa: E402
from storefront_service.gateways.dynamodb_gateway import sort_rows  # noqa: E402


class InMemoryTableGateway(TableGateway):
    """TableGateway keeping rows in dicts, with switchable failures per operation."""

    def __init__(self, rows: dict[str, list[dict[str, Any]]] | None = None) -> None:
        super().__init__("memory")
        self.rows: dict[str, list[dict[str, Any]]] = {
            collection: [dict(row) for row in items] for collection, items in (rows or {}).items()
        }
        self.failing: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self._next_id = 1
        self._clock = datetime(2024, 1, 1, tzinfo=UTC)

    def _collection(self, collection: str) -> list[dict[str, Any]]:
        return self.rows.setdefault(collection, [])

    async def select(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order: Sequence[OrderBy] | None = None,
    ) -> list[dict[str, Any]] | None:
        self.calls.append(("select", collection))
        if "select" in self.failing:
            return None
        rows = [
            dict(row)
            for row in self._collection(collection)
            if all(row.get(column) == value for column, value in (filters or {}).items())
        ]
        return sort_rows(rows, order) if order else rows

    async def insert(self, collection: str, row: dict[str, Any]) -> bool:
        self.calls.append(("insert", collection))
        if "insert" in self.failing:
            return False
        stored = dict(row)
        stored.setdefault("id", f"{collection}-{self._next_id}")
        self._next_id += 1
        self._clock += timedelta(seconds=1)
        stored.setdefault("created_at", self._clock.isoformat())
        self._collection(collection).append(stored)
        return True

    async def update(self, collection: str, row_id: str, partial_row: dict[str, Any]) -> bool:
        self.calls.append(("update", collection))
        if "update" in self.failing:
            return False
        for row in self._collection(collection):
            if row["id"] == row_id:
                row.update(partial_row)
        return True

    async def delete(self, collection: str, row_id: str) -> bool:
        self.calls.append(("delete", collection))
        if "delete" in self.failing:
            return False
        self.rows[collection] = [row for row in self._collection(collection) if row["id"] != row_id]
        return True


@pytest.fixture
def category_rows() -> list[dict[str, Any]]:
    """Fixture providing category rows as the store returns them."""
    return [
        {
            "id": "cat_cakes",
            "name": "Cakes",
            "description": "Layered and baked fresh",
            "display_order": 1,
            "is_active": True,
            "created_at": "2024-01-01T09:00:00+00:00",
        },
        {
            "id": "cat_drinks",
            "name": "Drinks",
            "description": None,
            "display_order": 2,
            "is_active": True,
            "created_at": "2024-01-01T09:05:00+00:00",
        },
        {
            "id": "cat_seasonal",
            "name": "Seasonal",
            "description": "Back next winter",
            "display_order": 0,
            "is_active": False,
            "created_at": "2024-01-01T09:10:00+00:00",
        },
    ]


@pytest.fixture
def product_rows() -> list[dict[str, Any]]:
    """Fixture providing product rows as the store returns them."""
    return [
        {
            "id": "prod_tart",
            "category_id": "cat_cakes",
            "name": "Lemon Tart",
            "description": "Sharp and sweet",
            "price": 6.5,
            "image_url": None,
            "is_available": True,
            "display_order": 2,
            "created_at": "2024-01-02T10:00:00+00:00",
        },
        {
            "id": "prod_lava",
            "category_id": "cat_cakes",
            "name": "Lava Cake",
            "description": "Molten centre",
            "price": "8.00",
            "image_url": "https://example.com/lava.jpg",
            "is_available": True,
            "display_order": 1,
            "created_at": "2024-01-02T10:05:00+00:00",
        },
        {
            "id": "prod_soldout",
            "category_id": "cat_cakes",
            "name": "Cheesecake",
            "description": None,
            "price": 7,
            "image_url": None,
            "is_available": False,
            "display_order": 3,
            "created_at": "2024-01-02T10:10:00+00:00",
        },
        {
            "id": "prod_cocoa",
            "category_id": "cat_drinks",
            "name": "Hot Cocoa",
            "description": None,
            "price": "3.25",
            "image_url": None,
            "is_available": True,
            "display_order": 0,
            "created_at": "2024-01-02T10:15:00+00:00",
        },
    ]


@pytest.fixture
def memory_gateway(
    category_rows: list[dict[str, Any]], product_rows: list[dict[str, Any]]
) -> InMemoryTableGateway:
    """Fixture providing an in-memory gateway seeded with the sample rows."""
    return InMemoryTableGateway({"menu_categories": category_rows, "products": product_rows})


@pytest.fixture
def empty_gateway() -> InMemoryTableGateway:
    """Fixture providing an in-memory gateway with no rows."""
    return InMemoryTableGateway()


@pytest.fixture
def make_gateway() -> type[InMemoryTableGateway]:
    """Fixture providing the in-memory gateway class for tests that seed their own rows."""
    return InMemoryTableGateway
