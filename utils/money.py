"""
Fixed-point money helpers.

Amounts are ``Decimal`` values with two decimal places in the domain and
integer cents at rest. Every multiplication names its rounding mode.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """
    Coerce a user-supplied amount into a ``Decimal``.

    Floats go through ``str`` so 0.1 becomes Decimal("0.1") rather than its
    binary expansion.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {value!r}") from None
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        raise ValueError(f"Invalid amount: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return result


def quantize(amount: Decimal, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Round to whole cents."""
    return amount.quantize(CENT, rounding=rounding)


def to_cents(amount: Decimal) -> int:
    """Convert an amount already expressed in whole cents to an integer."""
    cents = amount * 100
    if cents != cents.to_integral_value():
        raise ValueError(f"Amount {amount} has sub-cent precision")
    return int(cents)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def percentage_of(amount: Decimal, rate: Decimal) -> Decimal:
    """Fee-style share of an amount, rounded half-up to the cent."""
    return quantize(amount * rate, ROUND_HALF_UP)


def apply_multiplier(amount: Decimal, multiplier: Decimal) -> Decimal:
    """Odds payout, rounded down to the cent so the house never overpays."""
    return quantize(amount * multiplier, ROUND_DOWN)


def format_money(amount: Decimal) -> str:
    """Return a display string such as ``$1,234.50``."""
    return f"${quantize(amount):,.2f}"
