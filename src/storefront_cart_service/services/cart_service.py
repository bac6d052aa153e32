"""Cart service: the server-side mirror of client carts."""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from storefront_cart_service.exceptions import ValidationError
from storefront_cart_service.models.cart_models import Cart
from storefront_cart_service.observability.decorators import traced
from storefront_cart_service.observability.metrics import record_cart_upsert
from storefront_cart_service.repositories.storefront_repositories import CartRepository

logger = logging.getLogger(__name__)


class CartService:
    """Service for reading and replacing per-session carts.

    The client owns the in-progress cart and pushes its full state on every
    change. This service only mirrors it: reads fall back to an empty cart and
    writes replace the stored item list wholesale.
    """

    def __init__(self, cart_repository: CartRepository) -> None:
        """Initialize the CartService.

        Args:
            cart_repository: Repository for storing carts
        """
        self.cart_repository = cart_repository

    @traced("get_cart")
    async def get_cart(self, session_id: str) -> Cart:
        """Get the mirrored cart for a session.

        Args:
            session_id: The session identifier

        Returns:
            The stored cart, or an empty cart if the session has none yet
        """
        cart = self.cart_repository.get_cart(session_id)
        if cart is None:
            logger.debug(f"No cart stored for session {session_id}, returning empty cart")
            return Cart(session_id=session_id)
        return cart

    @traced("save_cart")
    async def save_cart(self, session_id: Any, items: Any) -> Cart:
        """Replace the cart for a session, creating it if absent.

        Args:
            session_id: The session identifier from the request payload
            items: The complete list of cart lines; None is treated as empty

        Returns:
            The cart as stored

        Raises:
            ValidationError: If session_id is missing or items are malformed
        """
        if not isinstance(session_id, str) or not session_id.strip():
            raise ValidationError("sessionId is required")

        if items is None:
            items = []
        if not isinstance(items, list):
            raise ValidationError("items must be a list")

        try:
            cart = Cart(session_id=session_id, items=items)
        except PydanticValidationError as e:
            logger.warning(f"Rejected cart for session {session_id}: {e.error_count()} errors")
            raise ValidationError("Failed to save cart") from e

        stored = self.cart_repository.upsert_cart(cart)
        record_cart_upsert(len(stored.items))
        logger.info(f"Stored cart for session {session_id} with {len(stored.items)} lines")
        return stored
