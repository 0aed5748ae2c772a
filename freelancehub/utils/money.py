"""Money helpers."""
from decimal import Decimal, InvalidOperation
from typing import Any

from freelancehub.utils.errors import InvalidArgument

CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Convert an amount to a 2-decimal ``Decimal``.

    Accepts Decimal, int, float and str. Raises ``InvalidArgument`` when the
    value cannot be parsed.
    """
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            # str() avoids binary float artefacts
            d = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as e:
            raise InvalidArgument(f"Invalid money amount: {value!r}", code="INVALID_AMOUNT") from e
    if not d.is_finite():
        raise InvalidArgument(f"Invalid money amount: {value!r}", code="INVALID_AMOUNT")
    return d.quantize(CENT)


def positive_amount(value: Any) -> Decimal:
    """Return ``value`` as a Decimal, rejecting zero and negative amounts."""

    amount = to_decimal(value)
    if amount <= 0:
        raise InvalidArgument("Amount must be greater than zero.", code="INVALID_AMOUNT")
    return amount


__all__ = ["CENT", "to_decimal", "positive_amount"]
