"""Main application entry point for the storefront service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os

from fastapi import FastAPI

from storefront_service.factories import create_session_gate, create_table_gateway
from storefront_service.handlers.api_handler import create_app
from storefront_service.observability import configure_logging, setup_observability
from storefront_service.services.crud_synchronizer import (
    ProductSynchronizer,
    create_category_synchronizer,
)
from storefront_service.services.dashboard_service import DashboardService
from storefront_service.services.menu_aggregator import MenuAggregator

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the data gateway
    3. Creates the menu, admin and dashboard services
    4. Creates FastAPI app with storefront and admin endpoints
    5. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)

    logger.info("Initializing storefront service...")

    gateway = create_table_gateway()

    menu_aggregator = MenuAggregator(gateway)
    category_synchronizer = create_category_synchronizer(gateway)
    product_synchronizer = ProductSynchronizer(gateway)
    dashboard_service = DashboardService()
    session_gate = create_session_gate()

    logger.info("Services initialized")

    app = create_app(
        menu_aggregator=menu_aggregator,
        category_synchronizer=category_synchronizer,
        product_synchronizer=product_synchronizer,
        session_gate=session_gate,
        dashboard_service=dashboard_service,
        restore_refresh_token=os.getenv("ADMIN_REFRESH_TOKEN"),
    )

    setup_observability(app)

    logger.info("Storefront service initialized successfully")

    return app


# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    # Create a placeholder app for test imports
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
