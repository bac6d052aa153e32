"""Main application entry point for the storefront cart service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os
from typing import Any

import boto3
from fastapi import FastAPI

from storefront_cart_service.handlers.api_handler import create_app
from storefront_cart_service.observability import configure_logging, setup_observability
from storefront_cart_service.repositories.storefront_repositories import (
    CartRepository,
    CatalogRepository,
    OrderRepository,
)
from storefront_cart_service.services.cart_service import CartService
from storefront_cart_service.services.catalog_service import CatalogService
from storefront_cart_service.services.order_service import OrderService

logger = logging.getLogger(__name__)


def get_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        # Local DynamoDB accepts any credentials
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID", "dummy"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY", "dummy"),
        )

    logger.info(f"Using AWS DynamoDB in region {region}")
    # boto3 resolves credentials through its default chain (IAM role, env vars, etc.)
    return boto3.resource("dynamodb", region_name=region)


def parse_csv_env(name: str) -> list[str]:
    """Split a comma-separated environment variable into trimmed, non-empty values."""
    return [value.strip() for value in os.getenv(name, "").split(",") if value.strip()]


def get_admin_api_keys() -> list[str]:
    """Read admin API keys, falling back to a development key."""
    api_keys = parse_csv_env("ADMIN_API_KEY")
    if not api_keys:
        logger.warning("No ADMIN_API_KEY configured - using development key for menu admin")
        api_keys = ["dummy-key-for-development"]
    return api_keys


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the DynamoDB resource
    3. Initializes repositories and services
    4. Creates the FastAPI app
    5. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing storefront cart service...")

    dynamodb_resource = get_dynamodb_resource()

    carts_table = os.getenv("DYNAMODB_CARTS_TABLE", "storefront-carts")
    orders_table = os.getenv("DYNAMODB_ORDERS_TABLE", "storefront-orders")
    dishes_table = os.getenv("DYNAMODB_DISHES_TABLE", "storefront-dishes")

    cart_service = CartService(
        cart_repository=CartRepository(dynamodb_resource=dynamodb_resource, table_name=carts_table)
    )
    order_service = OrderService(
        order_repository=OrderRepository(dynamodb_resource=dynamodb_resource, table_name=orders_table)
    )
    catalog_service = CatalogService(
        catalog_repository=CatalogRepository(
            dynamodb_resource=dynamodb_resource, table_name=dishes_table
        )
    )

    logger.info(
        f"Repositories configured - carts: {carts_table}, orders: {orders_table}, "
        f"dishes: {dishes_table}"
    )

    app = create_app(
        cart_service=cart_service,
        order_service=order_service,
        catalog_service=catalog_service,
        api_keys=get_admin_api_keys(),
        cors_origins=parse_csv_env("CORS_ALLOW_ORIGINS") or None,
    )

    setup_observability(app, enable_exporters=os.getenv("OTEL_EXPORTER_ENABLED", "false") == "true")

    logger.info("Storefront cart service initialized successfully")
    return app


# Only build the real app outside tests so test collection needs no AWS config
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
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
