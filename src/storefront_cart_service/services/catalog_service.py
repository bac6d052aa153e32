"""Catalog service for listing and creating dishes."""

import logging
import uuid
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from storefront_cart_service.exceptions import ValidationError
from storefront_cart_service.models.catalog_models import Dish
from storefront_cart_service.repositories.storefront_repositories import CatalogRepository

logger = logging.getLogger(__name__)


class CatalogService:
    """Read access to the menu for shoppers and basic writes for admins."""

    def __init__(self, catalog_repository: CatalogRepository) -> None:
        """Initialize the CatalogService.

        Args:
            catalog_repository: Repository for storing dishes
        """
        self.catalog_repository = catalog_repository

    async def list_menu(self) -> list[Dish]:
        """List available dishes sorted by name."""
        return self.catalog_repository.list_available_dishes()

    async def create_dish(self, payload: dict[str, Any]) -> Dish:
        """Create a dish from an admin payload.

        Args:
            payload: Dish fields in wire format (name, price, description,
                imageURL, isAvailable, category)

        Returns:
            The stored dish with its generated id

        Raises:
            ValidationError: If name or price is missing or malformed
        """
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("name is required")

        price = payload.get("price")
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price < 0:
            raise ValidationError("price must be a non-negative number")

        fields = {key: value for key, value in payload.items() if value is not None}
        fields.pop("id", None)
        fields["_id"] = f"dish_{uuid.uuid4().hex}"

        try:
            dish = Dish.model_validate(fields)
        except PydanticValidationError as e:
            raise ValidationError("Failed to create menu item") from e

        saved = self.catalog_repository.save_dish(dish)
        logger.info(f"Created dish {saved.id} ({saved.name})")
        return saved
