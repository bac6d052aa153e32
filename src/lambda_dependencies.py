"""Shared dependency factory for the Lambda handler.

Dependencies are created once per Lambda container and reused across
invocations to keep warm starts cheap.
"""

import logging
import os
from typing import Any

import boto3
from fastapi import FastAPI

from storefront_cart_service.handlers.api_handler import create_app
from storefront_cart_service.observability import configure_logging
from storefront_cart_service.repositories.storefront_repositories import (
    CartRepository,
    CatalogRepository,
    OrderRepository,
)
from storefront_cart_service.services.cart_service import CartService
from storefront_cart_service.services.catalog_service import CatalogService
from storefront_cart_service.services.order_service import OrderService

logger = logging.getLogger(__name__)

# Module-level caches for Lambda container reuse
_dynamodb_resource: Any | None = None
_cart_service: CartService | None = None
_order_service: OrderService | None = None
_catalog_service: CatalogService | None = None
_fastapi_app: FastAPI | None = None


def get_dynamodb_resource() -> Any:
    """Create or retrieve cached DynamoDB resource.

    Returns:
        Boto3 DynamoDB resource for the Lambda's region
    """
    global _dynamodb_resource

    if _dynamodb_resource is None:
        region = os.getenv("AWS_REGION", "us-east-1")
        logger.info(f"Using AWS DynamoDB in region {region}")
        _dynamodb_resource = boto3.resource("dynamodb", region_name=region)

    return _dynamodb_resource


def get_cart_service() -> CartService:
    """Create or retrieve cached cart service."""
    global _cart_service

    if _cart_service is None:
        table_name = os.getenv("DYNAMODB_CARTS_TABLE", "storefront-carts")
        _cart_service = CartService(
            cart_repository=CartRepository(get_dynamodb_resource(), table_name=table_name)
        )
        logger.info("Cart service initialized")

    return _cart_service


def get_order_service() -> OrderService:
    """Create or retrieve cached order service."""
    global _order_service

    if _order_service is None:
        table_name = os.getenv("DYNAMODB_ORDERS_TABLE", "storefront-orders")
        _order_service = OrderService(
            order_repository=OrderRepository(get_dynamodb_resource(), table_name=table_name)
        )
        logger.info("Order service initialized")

    return _order_service


def get_catalog_service() -> CatalogService:
    """Create or retrieve cached catalog service."""
    global _catalog_service

    if _catalog_service is None:
        table_name = os.getenv("DYNAMODB_DISHES_TABLE", "storefront-dishes")
        _catalog_service = CatalogService(
            catalog_repository=CatalogRepository(get_dynamodb_resource(), table_name=table_name)
        )
        logger.info("Catalog service initialized")

    return _catalog_service


def get_fastapi_app() -> FastAPI:
    """Create or retrieve cached FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    api_keys = [key.strip() for key in os.getenv("ADMIN_API_KEY", "").split(",") if key.strip()]
    if not api_keys:
        logger.warning("No ADMIN_API_KEY configured - using development key")
        api_keys = ["dummy-key-for-development"]

    origins = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if o.strip()]

    _fastapi_app = create_app(
        cart_service=get_cart_service(),
        order_service=get_order_service(),
        catalog_service=get_catalog_service(),
        api_keys=api_keys,
        cors_origins=origins or None,
    )

    logger.info("FastAPI application initialized")
    return _fastapi_app


def initialize_lambda_environment() -> None:
    """Configure structured logging. Called once per cold start."""
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    logger.info("Lambda environment initialized")
