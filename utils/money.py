"""Minor-unit conversion for amounts typed in major units.

Stripe takes integer minor units (cents, pence). Users type decimals.
Conversion goes through Decimal so 19.999 becomes 2000, not 1999.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

_MINOR_UNITS_PER_MAJOR = Decimal(100)

# Stripe caps an amount at eight integer digits of minor units
MAX_AMOUNT = Decimal("999999.99")


def parse_amount(value: str | int | float | Decimal | None) -> Decimal | None:
    """
    Parse a user-entered amount into a Decimal.

    Floats go through str() so 0.1 stays 0.1 instead of its binary expansion.
    Blank or unparseable input returns None.

    Raises:
        ValueError: If the amount parses but is not finite or exceeds MAX_AMOUNT
    """
    if value is None:
        return None
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, Decimal):
        parsed = value
    else:
        try:
            text = str(value).strip()
            if not text:
                return None
            parsed = Decimal(text)
        except InvalidOperation:
            return None

    if not parsed.is_finite():
        raise ValueError(f"Amount must be a finite number, got {value!r}")
    if abs(parsed) > MAX_AMOUNT:
        raise ValueError(f"Amount {value!r} exceeds the maximum of {MAX_AMOUNT}")
    return parsed


def to_minor_units(amount: str | int | float | Decimal) -> int:
    """
    Convert a major-unit amount to integer minor units, rounding half up.

    Raises:
        ValueError: If the amount cannot be parsed or is out of range
    """
    parsed = parse_amount(amount)
    if parsed is None:
        raise ValueError(f"Invalid amount: {amount!r}")
    scaled = parsed * _MINOR_UNITS_PER_MAJOR
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))
