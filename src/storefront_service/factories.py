"""Factories building the service's collaborators from environment variables."""

import logging
import os
from typing import Any

import boto3

from storefront_service.auth.auth_client import AuthClient
from storefront_service.auth.session_gate import SessionGate
from storefront_service.gateways.base_gateway import TableGateway
from storefront_service.gateways.dynamodb_gateway import DynamoDBTableGateway
from storefront_service.gateways.rest_gateway import RestTableGateway

logger = logging.getLogger(__name__)


def get_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    # Check for local DynamoDB endpoint (for development)
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    logger.info(f"Using AWS DynamoDB in region {region}")
    # Production - boto3 will use default credential chain (IAM role, env vars, etc.)
    return boto3.resource("dynamodb", region_name=region)


def get_hosted_store_settings() -> tuple[str, str]:
    """Read the hosted store URL and API key.

    Returns:
        Tuple of (base URL, API key)

    Raises:
        ValueError: If either setting is missing
    """
    base_url = os.getenv("SUPABASE_URL")
    api_key = os.getenv("SUPABASE_API_KEY")
    if not base_url or not api_key:
        raise ValueError("SUPABASE_URL and SUPABASE_API_KEY must be set in environment")
    return base_url, api_key


def get_gateway_timeout() -> float:
    return float(os.getenv("GATEWAY_TIMEOUT_SECONDS", "5"))


def create_table_gateway() -> TableGateway:
    """Create the data gateway selected by DATA_GATEWAY_BACKEND.

    Returns:
        A REST (hosted store) or DynamoDB gateway

    Raises:
        ValueError: If the backend is unknown or its settings are missing
    """
    backend = os.getenv("DATA_GATEWAY_BACKEND", "rest").lower()

    if backend == "rest":
        base_url, api_key = get_hosted_store_settings()
        logger.info(f"Data gateway: hosted store at {base_url}")
        return RestTableGateway(
            base_url=base_url, api_key=api_key, timeout_seconds=get_gateway_timeout()
        )

    if backend == "dynamodb":
        table_prefix = os.getenv("DYNAMODB_TABLE_PREFIX", "storefront-")
        logger.info(f"Data gateway: DynamoDB tables prefixed '{table_prefix}'")
        return DynamoDBTableGateway(
            dynamodb_resource=get_dynamodb_resource(), table_prefix=table_prefix
        )

    raise ValueError(f"Unknown DATA_GATEWAY_BACKEND '{backend}', expected 'rest' or 'dynamodb'")


def create_session_gate() -> SessionGate:
    """Create the admin session gate backed by the hosted auth service."""
    base_url, api_key = get_hosted_store_settings()
    auth_client = AuthClient(base_url=base_url, api_key=api_key, timeout_seconds=get_gateway_timeout())
    return SessionGate(auth_client)
