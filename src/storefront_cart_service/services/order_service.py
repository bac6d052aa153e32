"""Order service: turns cart snapshots into immutable order records."""

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, NoReturn

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storefront_cart_service.exceptions import InvalidPayload
from storefront_cart_service.models.cart_models import CartLine, Order, OrderStatusEnum
from storefront_cart_service.models.money import MAX_MONEY_DIGITS, Money
from storefront_cart_service.observability.decorators import traced
from storefront_cart_service.observability.metrics import record_order_placed, record_order_rejected
from storefront_cart_service.repositories.storefront_repositories import OrderRepository

logger = logging.getLogger(__name__)

_cart_lines = TypeAdapter(list[CartLine])
_money = TypeAdapter(Money)


class OrderService:
    """Service for committing and listing orders.

    The order total is accepted from the client as-is. It is never recomputed
    from the lines, so an order records exactly what the shopper was shown.
    Clearing the cart after checkout is the caller's job; this service does
    not touch the cart store.
    """

    def __init__(self, order_repository: OrderRepository) -> None:
        """Initialize the OrderService.

        Args:
            order_repository: Repository for storing orders
        """
        self.order_repository = order_repository

    @traced("place_order")
    async def place_order(self, session_id: Any, items: Any, total: Any) -> Order:
        """Validate a cart snapshot and persist it as a pending order.

        Args:
            session_id: Session placing the order
            items: Non-empty list of cart lines
            total: Non-negative number computed by the client

        Returns:
            The persisted order, including its id and creation timestamp

        Raises:
            InvalidPayload: If any field fails validation (nothing is written)
            StoreFailure: If the order could not be persisted
        """
        lines, amount = self._validate_payload(session_id, items, total)

        order = Order(
            id=f"ord_{uuid.uuid4().hex}",
            session_id=session_id,
            items=lines,
            total=amount,
            status=OrderStatusEnum.PENDING,
            created_at=datetime.now(UTC),
        )

        saved = self.order_repository.save_order(order)
        record_order_placed(saved.total, len(saved.items))
        logger.info(f"Placed order {saved.id} for session {session_id}: total {saved.total}")
        return saved

    @traced("list_orders")
    async def list_orders(self, session_id: str) -> list[Order]:
        """List all orders for a session, newest first.

        Args:
            session_id: The session identifier

        Returns:
            Orders sorted by creation time descending, empty list if none
        """
        return self.order_repository.list_orders_for_session(session_id)

    def _validate_payload(
        self, session_id: Any, items: Any, total: Any
    ) -> tuple[list[CartLine], Decimal]:
        if not isinstance(session_id, str) or not session_id.strip():
            self._reject("sessionId is required")

        if not isinstance(items, list) or not items:
            self._reject("items must be a non-empty list")

        # Numeric strings and booleans are not numbers
        if isinstance(total, bool) or not isinstance(total, (int, float, Decimal)):
            self._reject("total must be a number")
        amount = Decimal(str(total))
        if not amount.is_finite() or amount < 0:
            self._reject("total must be a non-negative number")
        try:
            amount = _money.validate_python(amount)
        except PydanticValidationError:
            self._reject(f"total must have at most {MAX_MONEY_DIGITS} digits")

        try:
            lines = _cart_lines.validate_python(items)
        except PydanticValidationError as e:
            logger.warning(f"Order lines failed validation: {e.error_count()} errors")
            self._reject("Invalid order payload")

        return lines, amount

    def _reject(self, message: str) -> NoReturn:
        record_order_rejected(message)
        raise InvalidPayload(message)
