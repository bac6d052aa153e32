"""Money type shared by catalog, cart and order models.

Prices and totals are Decimal in Python and in DynamoDB (boto3 rejects floats)
and plain JSON numbers on the wire.
"""

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import Field, PlainSerializer

# DynamoDB numbers carry at most 38 significant digits.
MAX_MONEY_DIGITS = 38

Money = Annotated[
    Decimal,
    Field(max_digits=MAX_MONEY_DIGITS),
    PlainSerializer(float, return_type=float, when_used="json"),
]


def to_decimal(value: Any) -> Any:
    """Convert a numeric value to Decimal.

    Floats go through ``str`` so that 5.99 stays 5.99. Booleans are rejected
    even though they are ints. Unknown types are returned unchanged for
    pydantic to reject.

    Raises:
        ValueError: If the value is a boolean or an unparseable string
    """
    if isinstance(value, bool):
        raise ValueError("must be a number")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError("must be a number") from e
    return value
