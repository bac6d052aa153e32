"""API key validation for catalog admin endpoints.

Shopper endpoints are keyed by an unauthenticated session identifier. Only
catalog writes require a key from the configured admin set.
"""

import hmac


class APIKeyValidator:
    """Checks admin API keys against the configured set."""

    def __init__(self, api_keys: list[str]) -> None:
        """Initialize validator with the accepted admin keys.

        Args:
            api_keys: Accepted API key strings; blank entries are ignored

        Raises:
            ValueError: If no usable API key is provided
        """
        keys = [key for key in api_keys if key and key.strip()]
        if not keys:
            raise ValueError("At least one API key must be provided")

        self.api_keys = tuple(keys)

    def validate(self, api_key: str) -> bool:
        """Validate an API key using constant-time comparison.

        Args:
            api_key: The API key to validate

        Returns:
            bool: True if the key matches a configured key, False otherwise
        """
        candidate = api_key.encode()
        return any(hmac.compare_digest(candidate, key.encode()) for key in self.api_keys)
