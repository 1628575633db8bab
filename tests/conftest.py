"""Shared pytest fixtures and configuration for all tests."""

import os
from decimal import Decimal

# main.py and lambda_handler.py skip app creation in test mode
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402


@pytest.fixture
def mock_order_id() -> str:
    """Fixture providing a standard test order ID."""
    return "0f8d3c2a9b1e4d7f8a6c5b4e3d2c1b0a"


@pytest.fixture
def mock_order_payload() -> dict:
    """Fixture providing a valid create/replace order body."""
    return {"dish": "Soup", "price": 9.5, "server": "Alice", "table": 3}


@pytest.fixture
def mock_order_item(mock_order_id: str) -> dict:
    """Fixture providing a stored order as returned by DynamoDB."""
    return {
        "id": mock_order_id,
        "dish": "Soup",
        "price": Decimal("9.5"),
        "server": "Alice",
        "table": Decimal("3"),
    }
