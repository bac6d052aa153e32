"""Exception taxonomy for the storefront cart service.

The API layer maps these to HTTP responses:
- ValidationError (and InvalidPayload) -> 400 with a message body
- StoreFailure -> 500, logged server-side

An absent cart is not an error; the cart service returns an empty cart instead.
"""


class StorefrontError(Exception):
    """Base class for storefront errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """A required field is missing or malformed."""


class InvalidPayload(ValidationError):
    """An order payload failed validation. Nothing was persisted."""


class StoreFailure(StorefrontError):
    """The underlying persistence layer could not complete an operation."""
