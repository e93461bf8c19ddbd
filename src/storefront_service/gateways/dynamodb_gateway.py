"""DynamoDB gateway for the menu collections.

Each collection is stored in its own table, keyed by `id`. DynamoDB has no
server-side ordering for scans, so ordering is applied here after the scan.
"""

import logging
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from storefront_service.gateways.base_gateway import OrderBy, TableGateway
from storefront_service.observability.metrics import record_gateway_request

logger = logging.getLogger(__name__)


def _to_dynamodb_value(value: Any) -> Any:
    # boto3 rejects floats; route them through str to keep the printed value
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _sort_key(value: Any) -> tuple[bool, Any]:
    return (value is None, 0 if value is None else value)


def sort_rows(rows: list[dict[str, Any]], order: Sequence[OrderBy]) -> list[dict[str, Any]]:
    """Sort rows by several columns, stable for ties.

    Missing values sort after present ones in ascending order.

    Args:
        rows: Rows to sort
        order: Ordering terms, most significant first

    Returns:
        A new, sorted list
    """
    result = list(rows)
    # Stable sorts applied least significant first compose into a multi-key sort
    for term in reversed(order):
        result.sort(
            key=lambda row, column=term.column: _sort_key(row.get(column)),
            reverse=not term.ascending,
        )
    return result


class DynamoDBTableGateway(TableGateway):
    """Gateway storing each collection in a DynamoDB table named `<prefix><collection>`."""

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_prefix: str = "") -> None:
        """Initialize the gateway.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_prefix: Prefix prepended to every collection name
        """
        super().__init__("dynamodb")
        self.dynamodb = dynamodb_resource
        self.table_prefix = table_prefix
        self._tables: dict[str, Table] = {}

    def _table(self, collection: str) -> Table:
        if collection not in self._tables:
            self._tables[collection] = self.dynamodb.Table(f"{self.table_prefix}{collection}")
        return self._tables[collection]

    async def select(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order: Sequence[OrderBy] | None = None,
    ) -> list[dict[str, Any]] | None:
        """Scan a table, following pagination, then order the rows.

        Args:
            collection: Table name without prefix
            filters: Equality filters, column name to required value
            order: Ordering terms applied in sequence

        Returns:
            List of row dicts, or None on failure
        """
        scan_kwargs: dict[str, Any] = {}
        condition = None
        for column, value in (filters or {}).items():
            term = Attr(column).eq(_to_dynamodb_value(value))
            condition = term if condition is None else condition & term
        if condition is not None:
            scan_kwargs["FilterExpression"] = condition

        try:
            table = self._table(collection)
            rows: list[dict[str, Any]] = []
            while True:
                response = table.scan(**scan_kwargs)
                rows.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key

        except ClientError as e:
            logger.error(f"Failed to scan {collection}: {e}")
            record_gateway_request(self.backend_name, collection, "select", False)
            return None

        record_gateway_request(self.backend_name, collection, "select", True)
        return sort_rows(rows, order) if order else rows

    async def insert(self, collection: str, row: dict[str, Any]) -> bool:
        """Put a new item, assigning `id` and `created_at` when absent.

        Args:
            collection: Table name without prefix
            row: Column values for the new row

        Returns:
            bool: True if the insert succeeded, False otherwise
        """
        item = {key: _to_dynamodb_value(value) for key, value in row.items()}
        item.setdefault("id", uuid.uuid4().hex)
        item.setdefault("created_at", datetime.now(UTC).isoformat())

        try:
            self._table(collection).put_item(Item=item)
            record_gateway_request(self.backend_name, collection, "insert", True)
            return True

        except ClientError as e:
            logger.error(f"Failed to insert into {collection}: {e}")
            record_gateway_request(self.backend_name, collection, "insert", False)
            return False

    async def update(self, collection: str, row_id: str, partial_row: dict[str, Any]) -> bool:
        """Overwrite the submitted attributes of an existing item.

        An id that matches no item changes nothing and still counts as success,
        the same as a filtered PATCH on the REST backend.

        Args:
            collection: Table name without prefix
            row_id: Identifier of the item to update
            partial_row: Attributes to overwrite

        Returns:
            bool: True if the update succeeded, False otherwise
        """
        if not partial_row:
            return True

        names: dict[str, str] = {}
        values: dict[str, Any] = {}
        assignments: list[str] = []
        for index, (column, value) in enumerate(partial_row.items()):
            names[f"#f{index}"] = column
            values[f":v{index}"] = _to_dynamodb_value(value)
            assignments.append(f"#f{index} = :v{index}")

        try:
            self._table(collection).update_item(
                Key={"id": row_id},
                UpdateExpression="SET " + ", ".join(assignments),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ConditionExpression=Attr("id").exists(),
            )
            record_gateway_request(self.backend_name, collection, "update", True)
            return True

        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                logger.warning(f"No {collection} item {row_id} to update")
                record_gateway_request(self.backend_name, collection, "update", True)
                return True
            logger.error(f"Failed to update {collection} item {row_id}: {e}")
            record_gateway_request(self.backend_name, collection, "update", False)
            return False

    async def delete(self, collection: str, row_id: str) -> bool:
        """Delete an item by id.

        Args:
            collection: Table name without prefix
            row_id: Identifier of the item to delete

        Returns:
            bool: True if the delete succeeded, False otherwise
        """
        try:
            self._table(collection).delete_item(Key={"id": row_id})
            record_gateway_request(self.backend_name, collection, "delete", True)
            return True

        except ClientError as e:
            logger.error(f"Failed to delete {collection} item {row_id}: {e}")
            record_gateway_request(self.backend_name, collection, "delete", False)
            return False
