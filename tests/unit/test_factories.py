"""Unit tests for the environment-driven factories."""

import os
from unittest.mock import MagicMock, Mock, patch

import pytest

from storefront_service.auth.session_gate import SessionGate
from storefront_service.factories import (
    create_session_gate,
    create_table_gateway,
    get_dynamodb_resource,
    get_gateway_timeout,
)
from storefront_service.gateways.dynamodb_gateway import DynamoDBTableGateway
from storefront_service.gateways.rest_gateway import RestTableGateway

HOSTED_STORE_ENV = {"SUPABASE_URL": "https://proj.test.co", "SUPABASE_API_KEY": "anon-key"}


@pytest.mark.unit
class TestGetDynamoDBResource:
    """Tests for get_dynamodb_resource function."""

    @patch.dict(os.environ, {"DYNAMODB_ENDPOINT": "", "AWS_REGION": "us-west-2"}, clear=True)
    @patch("storefront_service.factories.boto3.resource")
    def test_creates_aws_resource_when_no_endpoint(self, mock_boto3_resource: Mock) -> None:
        """Test that AWS DynamoDB resource is created when no local endpoint configured."""
        mock_resource = MagicMock()
        mock_boto3_resource.return_value = mock_resource

        result = get_dynamodb_resource()

        mock_boto3_resource.assert_called_once_with("dynamodb", region_name="us-west-2")
        assert result == mock_resource

    @patch.dict(
        os.environ,
        {
            "DYNAMODB_ENDPOINT": "http://localhost:8000",
            "AWS_REGION": "us-east-1",
            "AWS_ACCESS_KEY_ID": "test-key",
            "AWS_SECRET_ACCESS_KEY": "test-secret",
        },
        clear=True,
    )
    @patch("storefront_service.factories.boto3.resource")
    def test_creates_local_resource_when_endpoint_provided(self, mock_boto3_resource: Mock) -> None:
        """Test that local DynamoDB resource is created when endpoint configured."""
        get_dynamodb_resource()

        mock_boto3_resource.assert_called_once_with(
            "dynamodb",
            endpoint_url="http://localhost:8000",
            region_name="us-east-1",
            aws_access_key_id="test-key",
            aws_secret_access_key="test-secret",
        )

    @patch.dict(os.environ, {}, clear=True)
    @patch("storefront_service.factories.boto3.resource")
    def test_uses_default_region_when_not_specified(self, mock_boto3_resource: Mock) -> None:
        """Test that default region us-east-1 is used when AWS_REGION not set."""
        get_dynamodb_resource()

        mock_boto3_resource.assert_called_once_with("dynamodb", region_name="us-east-1")


@pytest.mark.unit
class TestCreateTableGateway:
    """Tests for create_table_gateway function."""

    @patch.dict(os.environ, {**HOSTED_STORE_ENV, "GATEWAY_TIMEOUT_SECONDS": "2.5"}, clear=True)
    def test_rest_backend_is_default(self) -> None:
        """Test that the hosted store gateway is used by default."""
        gateway = create_table_gateway()

        assert isinstance(gateway, RestTableGateway)
        assert gateway.base_url == "https://proj.test.co"
        assert gateway.timeout_seconds == 2.5

    @patch.dict(os.environ, {"DATA_GATEWAY_BACKEND": "rest"}, clear=True)
    def test_rest_backend_requires_settings(self) -> None:
        """Test that missing hosted store settings are reported."""
        with pytest.raises(ValueError, match="SUPABASE_URL"):
            create_table_gateway()

    @patch.dict(
        os.environ,
        {"DATA_GATEWAY_BACKEND": "DynamoDB", "DYNAMODB_TABLE_PREFIX": "dev-"},
        clear=True,
    )
    @patch("storefront_service.factories.boto3.resource")
    def test_dynamodb_backend(self, mock_boto3_resource: Mock) -> None:
        """Test selecting the DynamoDB gateway."""
        gateway = create_table_gateway()

        assert isinstance(gateway, DynamoDBTableGateway)
        assert gateway.table_prefix == "dev-"
        assert gateway.dynamodb is mock_boto3_resource.return_value

    @patch.dict(os.environ, {}, clear=True)
    @patch("storefront_service.factories.boto3.resource")
    def test_dynamodb_default_prefix(self, mock_boto3_resource: Mock) -> None:
        """Test the default table prefix."""
        with patch.dict(os.environ, {"DATA_GATEWAY_BACKEND": "dynamodb"}):
            gateway = create_table_gateway()

        assert isinstance(gateway, DynamoDBTableGateway)
        assert gateway.table_prefix == "storefront-"

    @patch.dict(os.environ, {"DATA_GATEWAY_BACKEND": "sqlite"}, clear=True)
    def test_unknown_backend(self) -> None:
        """Test that an unknown backend is rejected."""
        with pytest.raises(ValueError, match="sqlite"):
            create_table_gateway()


@pytest.mark.unit
class TestCreateSessionGate:
    """Tests for create_session_gate function."""

    @patch.dict(os.environ, HOSTED_STORE_ENV, clear=True)
    def test_creates_gate_with_auth_client(self) -> None:
        """Test building the gate from the hosted store settings."""
        gate = create_session_gate()

        assert isinstance(gate, SessionGate)
        assert gate.auth_client.base_url == "https://proj.test.co"
        assert gate.auth_client.timeout_seconds == 5.0
        assert gate.is_authenticated() is False

    @patch.dict(os.environ, {}, clear=True)
    def test_requires_settings(self) -> None:
        """Test that the auth service needs the hosted store settings."""
        with pytest.raises(ValueError):
            create_session_gate()

    @patch.dict(os.environ, {}, clear=True)
    def test_default_timeout(self) -> None:
        """Test the default request timeout."""
        assert get_gateway_timeout() == 5.0
