"""DynamoDB repository classes for catalog, cart and order models.

Absence is reported with simple return values (None or an empty list).
DynamoDB failures are logged and raised as StoreFailure so the API can
answer 500 instead of mistaking an outage for an empty cart.
"""

import logging
from typing import Any

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from storefront_cart_service.exceptions import StoreFailure
from storefront_cart_service.models.cart_models import Cart, Order
from storefront_cart_service.models.catalog_models import Dish

logger = logging.getLogger(__name__)


def _paginate(operation: Any, **kwargs: Any) -> list[dict[str, Any]]:
    """Collect items across all pages of a query or scan."""
    items: list[dict[str, Any]] = []
    while True:
        response = operation(**kwargs)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


class CartRepository:
    """Repository for cart documents.

    Manages one cart record per session in DynamoDB with session_id as
    partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_cart(self, session_id: str) -> Cart | None:
        """Retrieve the cart for a session.

        Args:
            session_id: Session identifier

        Returns:
            Cart if one has been stored, None otherwise

        Raises:
            StoreFailure: If DynamoDB cannot be read
        """
        try:
            response = self.table.get_item(Key={"session_id": session_id})
        except ClientError as e:
            logger.error(f"Failed to get cart for session {session_id}: {e}")
            raise StoreFailure("Failed to fetch cart") from e

        if "Item" not in response:
            return None

        return Cart.from_dynamodb_item(response["Item"])

    def upsert_cart(self, cart: Cart) -> Cart:
        """Replace the stored cart for a session, creating it if absent.

        A single PutItem replaces the whole item, so concurrent writers for the
        same session never merge: the last write applied by DynamoDB wins.

        Args:
            cart: Cart to store

        Returns:
            Cart: The cart as stored

        Raises:
            StoreFailure: If DynamoDB rejects the write
        """
        try:
            self.table.put_item(Item=cart.to_dynamodb_item())
        except ClientError as e:
            logger.error(f"Failed to save cart for session {cart.session_id}: {e}")
            raise StoreFailure("Failed to save cart") from e

        return cart


class OrderRepository:
    """Repository for order records.

    Manages orders in DynamoDB with order_id as partition key and a global
    secondary index on session_id (sort key created_at).
    """

    SESSION_INDEX = "session_id-index"

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def save_order(self, order: Order) -> Order:
        """Insert a new order.

        The write is conditional on the order_id not existing yet, so an
        existing order is never overwritten.

        Args:
            order: Order to insert

        Returns:
            Order: The order as stored

        Raises:
            StoreFailure: If DynamoDB rejects the write
        """
        try:
            self.table.put_item(
                Item=order.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(order_id)",
            )
        except ClientError as e:
            logger.error(f"Failed to save order {order.id}: {e}")
            raise StoreFailure("Failed to create order") from e

        return order

    def list_orders_for_session(self, session_id: str) -> list[Order]:
        """List every order for a session, most recent first.

        Args:
            session_id: Session identifier

        Returns:
            list: Orders sorted by created_at descending (empty list if none)

        Raises:
            StoreFailure: If DynamoDB cannot be queried
        """
        try:
            items = _paginate(
                self.table.query,
                IndexName=self.SESSION_INDEX,
                KeyConditionExpression="session_id = :sid",
                ExpressionAttributeValues={":sid": session_id},
                ScanIndexForward=False,  # Most recent first
            )
        except ClientError as e:
            logger.error(f"Failed to list orders for session {session_id}: {e}")
            raise StoreFailure("Failed to fetch orders") from e

        return [Order.from_dynamodb_item(item) for item in items]


class CatalogRepository:
    """Repository for catalog dishes, keyed by dish_id."""

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def list_available_dishes(self) -> list[Dish]:
        """List dishes that can currently be ordered, sorted by name.

        Returns:
            list: Available dishes (empty list if none)

        Raises:
            StoreFailure: If DynamoDB cannot be scanned
        """
        try:
            items = _paginate(
                self.table.scan,
                FilterExpression="is_available = :available",
                ExpressionAttributeValues={":available": True},
            )
        except ClientError as e:
            logger.error(f"Failed to list dishes: {e}")
            raise StoreFailure("Failed to fetch menu items") from e

        dishes = [Dish.from_dynamodb_item(item) for item in items]
        return sorted(dishes, key=lambda dish: dish.name)

    def save_dish(self, dish: Dish) -> Dish:
        """Save or replace a dish.

        Args:
            dish: Dish to save

        Returns:
            Dish: The dish as stored

        Raises:
            StoreFailure: If DynamoDB rejects the write
        """
        try:
            self.table.put_item(Item=dish.to_dynamodb_item())
        except ClientError as e:
            logger.error(f"Failed to save dish {dish.name}: {e}")
            raise StoreFailure("Failed to create menu item") from e

        return dish
