"""Base gateway for the hosted data store.

This module defines the abstract base class that every data store gateway
must implement. We use simple return values (None/False) for expected
failures rather than raising exceptions; callers decide how to report them.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class OrderBy:
    """One ordering term of a select.

    Attributes:
        column: Column to order by
        ascending: Sort direction, ascending by default
    """

    column: str
    ascending: bool = True


# Listings are ordered by display position, ties broken by creation order
DISPLAY_ORDER = (OrderBy("display_order"), OrderBy("created_at"))


class TableGateway(ABC):
    """Abstract base class for row-level access to the hosted data store.

    Gateways follow a simple error handling pattern:
    - select returns None on failure
    - insert, update and delete return False on failure
    - failures are logged by the gateway; nothing is raised for expected errors
    """

    def __init__(self, backend_name: str) -> None:
        """Initialize the gateway.

        Args:
            backend_name: Name of the storage backend (e.g., 'rest', 'dynamodb')
        """
        self.backend_name = backend_name

    @abstractmethod
    async def select(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order: Sequence[OrderBy] | None = None,
    ) -> list[dict[str, Any]] | None:
        """Read rows from a collection.

        Args:
            collection: Table name (e.g., 'menu_categories')
            filters: Equality filters, column name to required value
            order: Ordering terms applied in sequence

        Returns:
            List of row dicts (empty if none match), or None on failure
        """
        pass

    @abstractmethod
    async def insert(self, collection: str, row: dict[str, Any]) -> bool:
        """Insert a row. The store assigns generated fields such as `id`.

        Args:
            collection: Table name
            row: Column values for the new row

        Returns:
            bool: True if the insert succeeded, False otherwise
        """
        pass

    @abstractmethod
    async def update(self, collection: str, row_id: str, partial_row: dict[str, Any]) -> bool:
        """Update the given columns of the row with `row_id`.

        Args:
            collection: Table name
            row_id: Identifier of the row to update
            partial_row: Columns to overwrite; other columns are untouched

        Returns:
            bool: True if the update succeeded, False otherwise
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, row_id: str) -> bool:
        """Permanently remove the row with `row_id`.

        Args:
            collection: Table name
            row_id: Identifier of the row to delete

        Returns:
            bool: True if the delete succeeded, False otherwise
        """
        pass
