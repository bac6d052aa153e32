"""Pure cart reducer: ``apply(cart, mutation, catalog) -> cart``.

The reducer never persists or syncs anything. The reconciler runs those side
effects on its output. When a mutation changes nothing, the input cart object
is returned unchanged so callers can skip the side effects.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

from storefront_cart_service.models.cart_models import MAX_QUANTITY, Cart, CartLine
from storefront_cart_service.models.catalog_models import Dish


@dataclass(frozen=True)
class AddItem:
    """Add one unit of a catalog dish."""

    dish_name: str


@dataclass(frozen=True)
class RemoveItem:
    """Remove a dish's line whatever its quantity."""

    dish_name: str


@dataclass(frozen=True)
class SetQuantity:
    """Set a line's quantity from raw user input."""

    dish_name: str
    raw_value: Any


@dataclass(frozen=True)
class ClearCart:
    """Empty the cart."""


CartMutation = Union[AddItem, RemoveItem, SetQuantity, ClearCart]


def coerce_quantity(raw_value: Any) -> int:
    """Turn raw input into a quantity between 1 and ``MAX_QUANTITY``.

    Numbers and numeric strings are truncated to an integer. Anything
    non-numeric or non-finite becomes 1. Out-of-range values are clamped.
    """
    try:
        value = float(raw_value)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(value):
        return 1
    return min(MAX_QUANTITY, max(1, int(value)))


def find_dish(catalog: Sequence[Dish], dish_name: str) -> Dish | None:
    """Look a dish up by name in a catalog snapshot."""
    return next((dish for dish in catalog if dish.name == dish_name), None)


def _with_items(cart: Cart, items: list[CartLine]) -> Cart:
    return cart.model_copy(update={"items": items})


def apply(cart: Cart, mutation: CartMutation, catalog: Sequence[Dish] = ()) -> Cart:
    """Apply a mutation to a cart and return the resulting cart.

    Args:
        cart: Current cart (never modified)
        mutation: The mutation to apply
        catalog: Last-fetched catalog snapshot, used to price added dishes

    Returns:
        A new cart, or ``cart`` itself when the mutation is a no-op
    """
    if isinstance(mutation, AddItem):
        dish = find_dish(catalog, mutation.dish_name)
        if dish is None:
            return cart
        existing = cart.find_line(dish.name)
        if existing is None:
            return _with_items(
                cart, [*cart.items, CartLine(dish_name=dish.name, price=dish.price, quantity=1)]
            )
        if existing.quantity >= MAX_QUANTITY:
            return cart
        return _with_items(
            cart,
            [
                line.model_copy(update={"quantity": line.quantity + 1})
                if line.dish_name == dish.name
                else line
                for line in cart.items
            ],
        )

    if isinstance(mutation, RemoveItem):
        if cart.find_line(mutation.dish_name) is None:
            return cart
        return _with_items(
            cart, [line for line in cart.items if line.dish_name != mutation.dish_name]
        )

    if isinstance(mutation, SetQuantity):
        existing = cart.find_line(mutation.dish_name)
        quantity = coerce_quantity(mutation.raw_value)
        if existing is None or existing.quantity == quantity:
            return cart
        return _with_items(
            cart,
            [
                line.model_copy(update={"quantity": quantity})
                if line.dish_name == mutation.dish_name
                else line
                for line in cart.items
            ],
        )

    if isinstance(mutation, ClearCart):
        if not cart.items:
            return cart
        return _with_items(cart, [])

    raise TypeError(f"Unsupported cart mutation: {mutation!r}")
