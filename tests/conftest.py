"""Shared pytest fixtures and configuration for all tests."""

import copy
import os
import threading
from decimal import Decimal
from typing import Any

import pytest
from botocore.exceptions import ClientError

# main.py and lambda_handler.py skip building the real app in test mode
os.environ.setdefault("ENVIRONMENT", "test")

from storefront_cart_service.models.cart_models import CartLine  # noqa: E402
from storefront_cart_service.models.catalog_models import Dish  # noqa: E402


class FakeTable:
    """In-memory stand-in for a boto3 DynamoDB Table.

    Supports the calls the repositories make: whole-item put (optionally
    guarded by attribute_not_exists), get by key, query on the session index,
    and scan filtered on availability.
    """

    def __init__(self, key_name: str) -> None:
        self.key_name = key_name
        self.items: dict[str, dict[str, Any]] = {}
        self.lock = threading.Lock()

    def put_item(self, Item: dict[str, Any], ConditionExpression: str | None = None) -> dict:
        key = Item[self.key_name]
        with self.lock:
            if ConditionExpression == f"attribute_not_exists({self.key_name})" and key in self.items:
                raise ClientError(
                    {"Error": {"Code": "ConditionalCheckFailedException", "Message": "exists"}},
                    "PutItem",
                )
            self.items[key] = copy.deepcopy(Item)
        return {}

    def get_item(self, Key: dict[str, Any]) -> dict:
        with self.lock:
            item = self.items.get(Key[self.key_name])
        return {"Item": copy.deepcopy(item)} if item is not None else {}

    def query(self, **kwargs: Any) -> dict:
        session_id = kwargs["ExpressionAttributeValues"][":sid"]
        with self.lock:
            matches = [copy.deepcopy(i) for i in self.items.values() if i["session_id"] == session_id]
        matches.sort(key=lambda i: i["created_at"], reverse=not kwargs.get("ScanIndexForward", True))
        return {"Items": matches}

    def scan(self, **kwargs: Any) -> dict:
        wanted = kwargs["ExpressionAttributeValues"][":available"]
        with self.lock:
            matches = [copy.deepcopy(i) for i in self.items.values() if i["is_available"] == wanted]
        return {"Items": matches}


class FakeDynamoDBResource:
    """Hands out one FakeTable per table name."""

    KEYS = {"carts": "session_id", "orders": "order_id", "dishes": "dish_id"}

    def __init__(self) -> None:
        self.tables: dict[str, FakeTable] = {}

    def Table(self, name: str) -> FakeTable:  # noqa: N802
        if name not in self.tables:
            self.tables[name] = FakeTable(self.KEYS[name])
        return self.tables[name]


@pytest.fixture
def fake_dynamodb() -> FakeDynamoDBResource:
    """Fixture providing an in-memory DynamoDB resource."""
    return FakeDynamoDBResource()


@pytest.fixture
def mock_session_id() -> str:
    """Fixture providing a standard test session ID."""
    return "sess_0123456789abcdef"


@pytest.fixture
def sample_dishes() -> list[Dish]:
    """Fixture providing a catalog snapshot."""
    return [
        Dish(
            id="dish_1",
            name="Strawbeary Jam",
            price=Decimal("5.99"),
            description="A jammy dessert made from fresh strawberries",
            category="dessert",
        ),
        Dish(
            id="dish_2",
            name="Strawbeary Latte",
            price=Decimal("7.49"),
            description="A creamy strawberry latte",
            category="drink",
        ),
        Dish(
            id="dish_3",
            name="Strawbeary Sparkle",
            price=Decimal("12.99"),
            category="drink",
        ),
    ]


@pytest.fixture
def sample_lines() -> list[CartLine]:
    """Fixture providing two cart lines."""
    return [
        CartLine(dish_name="Strawbeary Jam", price=Decimal("5.99"), quantity=2),
        CartLine(dish_name="Strawbeary Latte", price=Decimal("7.49"), quantity=1),
    ]


@pytest.fixture
def sample_line_payload() -> list[dict]:
    """Fixture providing cart lines in wire format."""
    return [
        {"dishName": "Strawbeary Jam", "price": 5.99, "quantity": 2},
        {"dishName": "Strawbeary Latte", "price": 7.49, "quantity": 1},
    ]
