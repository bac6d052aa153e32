"""Client-local persistent storage for the cart snapshot and session identifier.

Values are JSON blobs stored one file per key, similar to a browser's
localStorage. Anything unreadable is treated as absent: a corrupt cart loads
as an empty cart and a corrupt session id is replaced by a fresh one.
"""

import json
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storefront_cart_service.models.cart_models import Cart, CartLine

logger = logging.getLogger(__name__)

CART_KEY = "storefront_cart"
SESSION_KEY = "storefront_session_id"

_cart_lines = TypeAdapter(list[CartLine])


def generate_session_id() -> str:
    """Create a new opaque session identifier."""
    return f"sess_{uuid.uuid4().hex}"


class LocalStorage:
    """Key-value JSON storage backed by a directory."""

    def __init__(self, directory: str | Path) -> None:
        """Initialize storage.

        Args:
            directory: Directory holding one file per key (created if missing)
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Any | None:
        """Read and decode the value stored under a key.

        Returns:
            The decoded JSON value, or None if the key is absent or unreadable
        """
        path = self._path(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read local storage key {key}: {e}")
            return None

        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError:
            logger.warning(f"Ignoring corrupt local storage value for {key}")
            return None

    def set_item(self, key: str, value: Any) -> None:
        """Encode and store a value, replacing the file atomically."""
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(value, handle)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def load_session_id(self) -> str:
        """Return the stored session id, creating and storing one if needed."""
        stored = self.get_item(SESSION_KEY)
        if isinstance(stored, str) and stored.strip():
            return stored

        session_id = generate_session_id()
        self.set_item(SESSION_KEY, session_id)
        logger.info(f"Started new storefront session {session_id}")
        return session_id

    def load_cart(self, session_id: str) -> Cart:
        """Return the stored cart for this installation, or an empty cart."""
        stored = self.get_item(CART_KEY)
        if stored is None:
            return Cart(session_id=session_id)

        try:
            return Cart(session_id=session_id, items=_cart_lines.validate_python(stored))
        except PydanticValidationError:
            logger.warning("Ignoring invalid cart in local storage")
            return Cart(session_id=session_id)

    def save_cart(self, cart: Cart) -> None:
        """Store the full cart item list."""
        self.set_item(CART_KEY, _cart_lines.dump_python(cart.items, mode="json", by_alias=True))
