"""Unit tests for DynamoDBTableGateway."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from storefront_service.gateways.base_gateway import DISPLAY_ORDER, OrderBy
from storefront_service.gateways.dynamodb_gateway import DynamoDBTableGateway, sort_rows


def _client_error(operation: str, code: str = "ResourceNotFoundException") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "Request failed"}}, operation)


@pytest.mark.unit
class TestSortRows:
    """Tests for sort_rows function."""

    def test_orders_by_display_order_then_created_at(self) -> None:
        """Test the listing order with ties broken by creation time."""
        rows = [
            {"id": "b", "display_order": 1, "created_at": "2024-01-02"},
            {"id": "a", "display_order": 1, "created_at": "2024-01-01"},
            {"id": "c", "display_order": 0, "created_at": "2024-01-03"},
        ]

        result = sort_rows(rows, DISPLAY_ORDER)

        assert [row["id"] for row in result] == ["c", "a", "b"]

    def test_missing_values_sort_last(self) -> None:
        """Test that rows without the column come after the others."""
        rows = [{"id": "x"}, {"id": "y", "display_order": 5}]

        result = sort_rows(rows, [OrderBy("display_order")])

        assert [row["id"] for row in result] == ["y", "x"]

    def test_descending(self) -> None:
        """Test a descending term."""
        rows = [{"id": "a", "price": 1}, {"id": "b", "price": 3}]

        result = sort_rows(rows, [OrderBy("price", ascending=False)])

        assert [row["id"] for row in result] == ["b", "a"]


@pytest.mark.unit
class TestDynamoDBTableGateway:
    """Test suite for DynamoDBTableGateway."""

    @pytest.fixture
    def mock_dynamodb(self) -> MagicMock:
        """Create a mock DynamoDB resource."""
        return MagicMock()

    @pytest.fixture
    def gateway(self, mock_dynamodb: MagicMock) -> DynamoDBTableGateway:
        """Create a gateway with mocked DynamoDB."""
        return DynamoDBTableGateway(dynamodb_resource=mock_dynamodb, table_prefix="test-")

    def test_table_names_are_prefixed_and_cached(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test that each collection maps to one prefixed table."""
        gateway._table("products")
        gateway._table("products")

        mock_dynamodb.Table.assert_called_once_with("test-products")

    @pytest.mark.asyncio
    async def test_select_follows_pagination_and_orders(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test that all scan pages are read and the rows sorted."""
        table = mock_dynamodb.Table.return_value
        table.scan.side_effect = [
            {
                "Items": [{"id": "b", "display_order": Decimal("2"), "created_at": "2024-01-01"}],
                "LastEvaluatedKey": {"id": "b"},
            },
            {"Items": [{"id": "a", "display_order": Decimal("1"), "created_at": "2024-01-02"}]},
        ]

        result = await gateway.select("menu_categories", order=DISPLAY_ORDER)

        assert result is not None
        assert [row["id"] for row in result] == ["a", "b"]
        assert table.scan.call_count == 2
        assert table.scan.call_args_list[1].kwargs["ExclusiveStartKey"] == {"id": "b"}

    @pytest.mark.asyncio
    async def test_select_with_filter_builds_expression(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test that equality filters become a scan filter expression."""
        table = mock_dynamodb.Table.return_value
        table.scan.return_value = {"Items": []}

        result = await gateway.select("products", filters={"is_available": True})

        assert result == []
        assert "FilterExpression" in table.scan.call_args.kwargs

    @pytest.mark.asyncio
    async def test_select_client_error_returns_none(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test that DynamoDB errors are reported as None."""
        mock_dynamodb.Table.return_value.scan.side_effect = _client_error("Scan")

        result = await gateway.select("products")

        assert result is None

    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_created_at(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test that generated fields are filled in and floats converted."""
        table = mock_dynamodb.Table.return_value

        result = await gateway.insert("products", {"name": "Tart", "price": 6.5})

        assert result is True
        item = table.put_item.call_args.kwargs["Item"]
        assert item["name"] == "Tart"
        assert item["price"] == Decimal("6.5")
        assert item["id"]
        assert item["created_at"]

    @pytest.mark.asyncio
    async def test_insert_client_error_returns_false(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test that a failed put returns False."""
        mock_dynamodb.Table.return_value.put_item.side_effect = _client_error("PutItem")

        result = await gateway.insert("products", {"name": "Tart"})

        assert result is False

    @pytest.mark.asyncio
    async def test_update_sets_only_given_attributes(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test the update expression for a partial row."""
        table = mock_dynamodb.Table.return_value

        result = await gateway.update("menu_categories", "c1", {"name": "Pies", "is_active": False})

        assert result is True
        kwargs = table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"id": "c1"}
        assert kwargs["UpdateExpression"] == "SET #f0 = :v0, #f1 = :v1"
        assert kwargs["ExpressionAttributeNames"] == {"#f0": "name", "#f1": "is_active"}
        assert kwargs["ExpressionAttributeValues"] == {":v0": "Pies", ":v1": False}
        assert kwargs["ConditionExpression"] == Attr("id").exists()

    @pytest.mark.asyncio
    async def test_update_of_missing_item_creates_nothing(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test that updating an id with no item is a successful no-op."""
        table = mock_dynamodb.Table.return_value
        table.update_item.side_effect = _client_error(
            "UpdateItem", code="ConditionalCheckFailedException"
        )

        result = await gateway.update("menu_categories", "deleted-elsewhere", {"is_active": True})

        assert result is True
        table.put_item.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_client_error_returns_false(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test that other update errors return False."""
        mock_dynamodb.Table.return_value.update_item.side_effect = _client_error("UpdateItem")

        result = await gateway.update("menu_categories", "c1", {"name": "Pies"})

        assert result is False

    @pytest.mark.asyncio
    async def test_empty_update_is_a_no_op(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test that an empty partial row makes no call."""
        result = await gateway.update("menu_categories", "c1", {})

        assert result is True
        mock_dynamodb.Table.return_value.update_item.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_by_id(self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock) -> None:
        """Test deleting an item by key."""
        result = await gateway.delete("products", "p1")

        assert result is True
        mock_dynamodb.Table.return_value.delete_item.assert_called_once_with(Key={"id": "p1"})

    @pytest.mark.asyncio
    async def test_delete_client_error_returns_false(
        self, gateway: DynamoDBTableGateway, mock_dynamodb: MagicMock
    ) -> None:
        """Test that a failed delete returns False."""
        mock_dynamodb.Table.return_value.delete_item.side_effect = _client_error("DeleteItem")

        result = await gateway.delete("products", "p1")

        assert result is False
