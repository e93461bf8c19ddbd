"""Gateway for a PostgREST data API such as the one Supabase serves."""

import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import httpx

from storefront_service.gateways.base_gateway import OrderBy, TableGateway
from storefront_service.observability.metrics import record_gateway_request

logger = logging.getLogger(__name__)


def _filter_value(value: Any) -> str:
    """Render a value as a PostgREST equality filter."""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def _jsonable(row: dict[str, Any]) -> dict[str, Any]:
    """Make a row JSON-serializable; Decimals travel as strings to keep precision."""
    return {key: str(value) if isinstance(value, Decimal) else value for key, value in row.items()}


class RestTableGateway(TableGateway):
    """HTTP gateway speaking the PostgREST protocol.

    Rows live under `<base_url>/rest/v1/<collection>`. The API key is sent
    both as the `apikey` header and as a bearer token, as the hosted store
    expects.
    """

    def __init__(self, base_url: str, api_key: str, timeout_seconds: float = 5.0) -> None:
        """Initialize the REST gateway.

        Args:
            base_url: Project URL of the hosted store (e.g., "https://xyz.supabase.co")
            api_key: API key for the data API
            timeout_seconds: Per-request timeout; expiry is treated as a failure
        """
        super().__init__("rest")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def _url(self, collection: str) -> str:
        return f"{self.base_url}/rest/v1/{collection}"

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Prefer": "return=minimal",
        }

    async def select(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order: Sequence[OrderBy] | None = None,
    ) -> list[dict[str, Any]] | None:
        """Fetch rows with `GET /rest/v1/<collection>`.

        Args:
            collection: Table name
            filters: Equality filters, column name to required value
            order: Ordering terms applied in sequence

        Returns:
            List of row dicts, or None on failure
        """
        params: list[tuple[str, str]] = [("select", "*")]
        for column, value in (filters or {}).items():
            params.append((column, _filter_value(value)))
        if order:
            terms = ",".join(
                f"{term.column}.{'asc' if term.ascending else 'desc'}" for term in order
            )
            params.append(("order", terms))

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(
                    self._url(collection), headers=self._headers(), params=params
                )
                response.raise_for_status()
                rows: list[dict[str, Any]] = response.json()

            record_gateway_request(self.backend_name, collection, "select", True)
            return rows

        except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as e:
            logger.error(f"Failed to select from {collection}: {e}")
            record_gateway_request(self.backend_name, collection, "select", False)
            return None

    async def insert(self, collection: str, row: dict[str, Any]) -> bool:
        """Insert a row with `POST /rest/v1/<collection>`.

        Args:
            collection: Table name
            row: Column values for the new row

        Returns:
            bool: True if the insert succeeded, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    self._url(collection), headers=self._headers(), json=[_jsonable(row)]
                )
                response.raise_for_status()

            record_gateway_request(self.backend_name, collection, "insert", True)
            return True

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Failed to insert into {collection}: {e}")
            record_gateway_request(self.backend_name, collection, "insert", False)
            return False

    async def update(self, collection: str, row_id: str, partial_row: dict[str, Any]) -> bool:
        """Update a row with `PATCH /rest/v1/<collection>?id=eq.<row_id>`.

        Args:
            collection: Table name
            row_id: Identifier of the row to update
            partial_row: Columns to overwrite

        Returns:
            bool: True if the update succeeded, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.patch(
                    self._url(collection),
                    headers=self._headers(),
                    params={"id": _filter_value(row_id)},
                    json=_jsonable(partial_row),
                )
                response.raise_for_status()

            record_gateway_request(self.backend_name, collection, "update", True)
            return True

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Failed to update {collection} row {row_id}: {e}")
            record_gateway_request(self.backend_name, collection, "update", False)
            return False

    async def delete(self, collection: str, row_id: str) -> bool:
        """Delete a row with `DELETE /rest/v1/<collection>?id=eq.<row_id>`.

        Args:
            collection: Table name
            row_id: Identifier of the row to delete

        Returns:
            bool: True if the delete succeeded, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.delete(
                    self._url(collection),
                    headers=self._headers(),
                    params={"id": _filter_value(row_id)},
                )
                response.raise_for_status()

            record_gateway_request(self.backend_name, collection, "delete", True)
            return True

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Failed to delete {collection} row {row_id}: {e}")
            record_gateway_request(self.backend_name, collection, "delete", False)
            return False
