"""Catalog data models.

Dishes are owned by the catalog. The cart only keeps a denormalized copy of a
dish's name and price, taken at the moment the dish was added.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from storefront_cart_service.models.money import Money, to_decimal


class Dish(BaseModel):
    """Catalog dish as served by ``GET /menu``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., alias="_id", description="Unique identifier for the dish")
    name: str = Field(..., min_length=1, description="Dish name")
    price: Money = Field(..., description="Current price", ge=0)
    description: str = Field(default="", description="Dish description")
    image_url: str = Field(default="", alias="imageURL", description="URL to dish image")
    is_available: bool = Field(default=True, description="Whether the dish can be ordered")
    category: str = Field(default="General", description="Menu category")

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> Decimal:
        """Convert JSON numbers to Decimal without float artifacts."""
        return to_decimal(v)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        return {
            "dish_id": self.id,
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "image_url": self.image_url,
            "is_available": self.is_available,
            "category": self.category,
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Dish":
        """Create Dish from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Dish: Parsed model instance
        """
        return cls(
            id=item["dish_id"],
            name=item["name"],
            price=item["price"],
            description=item.get("description", ""),
            image_url=item.get("image_url", ""),
            is_available=item.get("is_available", True),
            category=item.get("category", "General"),
        )
