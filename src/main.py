"""Main application entry point for the restaurant order service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os
from typing import Any

import boto3
from botocore.config import Config
from fastapi import FastAPI

from restaurant_order_service.handlers.api_handler import create_app
from restaurant_order_service.observability import configure_logging, setup_observability
from restaurant_order_service.repositories.order_repository import OrderRepository
from restaurant_order_service.services.order_service import DEFAULT_TIMEOUT_SECONDS, OrderService

logger = logging.getLogger(__name__)


def get_store_timeout() -> float:
    """Read the per-request store deadline from the environment.

    Returns:
        Deadline in seconds
    """
    return float(os.getenv("STORE_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))


def get_dynamodb_resource(timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Args:
        timeout_seconds: Connect and read timeout for a single attempt

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    # One attempt per call, bounded by the request deadline
    client_config = Config(
        connect_timeout=timeout_seconds,
        read_timeout=timeout_seconds,
        retries={"total_max_attempts": 1},
    )

    if endpoint_url:
        # Local DynamoDB - use environment variables for credentials
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
            config=client_config,
        )

    logger.info(f"Using AWS DynamoDB in region {region}")
    # Production - boto3 will use default credential chain (IAM role, env vars, etc.)
    return boto3.resource("dynamodb", region_name=region, config=client_config)


def create_order_service() -> OrderService:
    """Wire the order repository and service from environment configuration.

    Returns:
        Configured OrderService instance
    """
    timeout_seconds = get_store_timeout()
    dynamodb_resource = get_dynamodb_resource(timeout_seconds)

    orders_table = os.getenv("DYNAMODB_ORDERS_TABLE", "orders")
    order_repository = OrderRepository(dynamodb_resource=dynamodb_resource, table_name=orders_table)

    logger.info(f"Order repository configured - table: {orders_table}")

    return OrderService(order_repository=order_repository, timeout_seconds=timeout_seconds)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the DynamoDB resource and order repository
    3. Creates the order service
    4. Creates the FastAPI app
    5. Optionally sets up OpenTelemetry exporters

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing restaurant order service...")

    app = create_app(order_service=create_order_service())

    if os.getenv("ENABLE_OTEL", "false").lower() == "true":
        setup_observability(app)

    logger.info("Restaurant order service initialized successfully")

    return app


# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    # Create a placeholder app for test imports
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
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
