"""FastAPI dependency guarding catalog admin endpoints."""

from fastapi import HTTPException

from storefront_cart_service.auth.api_key_validator import APIKeyValidator


def require_admin_key(x_api_key: str | None, validator: APIKeyValidator) -> str:
    """Check the X-API-Key header value against the admin key set.

    Args:
        x_api_key: Value of the X-API-Key header, None when absent
        validator: Validator holding the configured admin keys

    Returns:
        str: The validated API key

    Raises:
        HTTPException: 401 if the key is missing or not accepted
    """
    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing API key")

    if not validator.validate(x_api_key):
        raise HTTPException(status_code=401, detail="Invalid API key")

    return x_api_key
