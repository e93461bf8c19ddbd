"""Shared dependency factory for the Lambda handler.

Dependencies are created once and reused across invocations within the same
Lambda container, which also keeps the admin session and screen state alive
between warm invocations.
"""

import asyncio
import logging
import os

from fastapi import FastAPI

from storefront_service.factories import create_session_gate, create_table_gateway
from storefront_service.gateways.base_gateway import TableGateway
from storefront_service.handlers.api_handler import create_app
from storefront_service.observability import configure_logging, setup_observability
from storefront_service.services.crud_synchronizer import (
    ProductSynchronizer,
    create_category_synchronizer,
)
from storefront_service.services.dashboard_service import DashboardService
from storefront_service.services.menu_aggregator import MenuAggregator

logger = logging.getLogger(__name__)

# Module-level caches for Lambda container reuse
_table_gateway: TableGateway | None = None
_fastapi_app: FastAPI | None = None


def get_table_gateway() -> TableGateway:
    """Create or retrieve the cached data gateway.

    Returns:
        The configured TableGateway
    """
    global _table_gateway

    if _table_gateway is None:
        _table_gateway = create_table_gateway()
    return _table_gateway


def get_fastapi_app() -> FastAPI:
    """Create or retrieve cached FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    gateway = get_table_gateway()
    session_gate = create_session_gate()

    # Mangum runs with lifespan off, so the stored session is restored here
    asyncio.run(session_gate.initialize(os.getenv("ADMIN_REFRESH_TOKEN")))

    _fastapi_app = create_app(
        menu_aggregator=MenuAggregator(gateway),
        category_synchronizer=create_category_synchronizer(gateway),
        product_synchronizer=ProductSynchronizer(gateway),
        session_gate=session_gate,
        dashboard_service=DashboardService(),
    )
    setup_observability(_fastapi_app)

    logger.info("FastAPI application initialized")
    return _fastapi_app


def reset_cache() -> None:
    """Drop cached dependencies so the next call rebuilds them."""
    global _table_gateway, _fastapi_app

    _table_gateway = None
    _fastapi_app = None


def initialize_lambda_environment() -> None:
    """Initialize Lambda environment with logging.

    Should be called once during Lambda cold start.
    """
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)

    logger.info("Lambda environment initialized")
