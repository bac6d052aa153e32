"""Cart and order models.

A Cart is the mirror of a visitor's in-progress cart, one per session.
An Order is an immutable point-in-time copy of cart lines; it keeps no link
back to the cart or the catalog, so later price changes never alter it.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from storefront_cart_service.models.money import Money, to_decimal


MAX_QUANTITY = 9999


class OrderStatusEnum(str, Enum):
    """Enumeration of order status values.

    Only PENDING is produced by order placement. PAID and CANCELLED are set by
    payment and fulfilment collaborators outside this service.
    """

    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class CartLine(BaseModel):
    """A named, priced, quantified entry within a cart."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    dish_name: str = Field(..., min_length=1, description="Dish name, unique within a cart")
    price: Money = Field(..., description="Dish price captured when it was added", ge=0)
    quantity: int = Field(..., description="Number of units", ge=1, le=MAX_QUANTITY)

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> Decimal:
        """Convert JSON numbers to Decimal without float artifacts."""
        return to_decimal(v)

    @property
    def subtotal(self) -> Decimal:
        """Price multiplied by quantity."""
        return self.price * self.quantity

    def to_dynamodb_item(self) -> dict[str, Any]:
        return {
            "dish_name": self.dish_name,
            "price": self.price,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "CartLine":
        return cls(
            dish_name=item["dish_name"],
            price=item["price"],
            quantity=int(item["quantity"]),
        )


class Cart(BaseModel):
    """Shopping cart for a single session.

    Stored in DynamoDB with session_id as partition key. ``count`` and
    ``total`` are derived from ``items`` on every read and never stored.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    session_id: str = Field(..., min_length=1, description="Opaque client session identifier")
    items: list[CartLine] = Field(default_factory=list, description="Cart lines in add order")

    @model_validator(mode="after")
    def validate_unique_dish_names(self) -> "Cart":
        """Validate that no dish appears on more than one line."""
        names = [line.dish_name for line in self.items]
        if len(names) != len(set(names)):
            raise ValueError("items must not contain the same dishName twice")
        return self

    @property
    def count(self) -> int:
        """Total number of units in the cart."""
        return sum(line.quantity for line in self.items)

    @property
    def total(self) -> Decimal:
        """Sum of price times quantity over all lines."""
        return sum((line.subtotal for line in self.items), Decimal("0"))

    def find_line(self, dish_name: str) -> CartLine | None:
        """Return the line for a dish, or None if the dish is not in the cart."""
        for line in self.items:
            if line.dish_name == dish_name:
                return line
        return None

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        return {
            "session_id": self.session_id,
            "items": [line.to_dynamodb_item() for line in self.items],
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Cart":
        """Create Cart from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Cart: Parsed model instance
        """
        return cls(
            session_id=item["session_id"],
            items=[CartLine.from_dynamodb_item(line) for line in item.get("items", [])],
        )


class Order(BaseModel):
    """Immutable order record created from a cart snapshot.

    Stored in DynamoDB with order_id as partition key and a global secondary
    index on (session_id, created_at) for newest-first history queries.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(..., alias="_id", description="Server-assigned order identifier")
    session_id: str = Field(..., min_length=1, description="Session that placed the order")
    items: list[CartLine] = Field(..., min_length=1, description="Snapshot of the cart lines")
    total: Money = Field(..., description="Order total as computed by the client", ge=0)
    status: OrderStatusEnum = Field(default=OrderStatusEnum.PENDING, description="Order status")
    created_at: datetime = Field(..., description="Server-assigned creation timestamp")

    @field_validator("total", mode="before")
    @classmethod
    def coerce_total(cls, v: Any) -> Decimal:
        """Convert JSON numbers to Decimal without float artifacts."""
        return to_decimal(v)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        return {
            "order_id": self.id,
            "session_id": self.session_id,
            "items": [line.to_dynamodb_item() for line in self.items],
            "total": self.total,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Order":
        """Create Order from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Order: Parsed model instance
        """
        return cls(
            id=item["order_id"],
            session_id=item["session_id"],
            items=[CartLine.from_dynamodb_item(line) for line in item["items"]],
            total=item["total"],
            status=OrderStatusEnum(item.get("status", OrderStatusEnum.PENDING.value)),
            created_at=datetime.fromisoformat(item["created_at"]),
        )
