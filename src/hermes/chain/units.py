"""Conversion between token base units and human-readable decimal amounts."""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

DEFAULT_DECIMALS = 18


def format_units(value: Union[int, str], decimals: int = DEFAULT_DECIMALS) -> str:
    """Format a base-unit integer as a decimal string.

    Always keeps at least one fractional digit and strips trailing zeros,
    so 10**18 with 18 decimals becomes "1.0" and 1500000 with 6 becomes "1.5".
    """
    raw = int(value)
    if decimals < 0:
        raise ValueError(f"Invalid decimals: {decimals}")

    negative = raw < 0
    digits = str(abs(raw)).rjust(decimals + 1, "0")

    whole = digits[: len(digits) - decimals] if decimals else digits
    fraction = digits[len(digits) - decimals :] if decimals else ""
    fraction = fraction.rstrip("0") or "0"

    return f"{'-' if negative else ''}{whole}.{fraction}"


def parse_units(amount: Union[str, int, Decimal], decimals: int = DEFAULT_DECIMALS) -> int:
    """Convert a decimal amount into base units.

    Raises:
        ValueError: If the amount is not a finite number or has more
            fractional digits than the token supports.
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount}")

    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount}")

    with localcontext() as ctx:
        # uint256 needs 78 significant digits
        ctx.prec = 80
        scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount} has more than {decimals} decimal places")

    return int(scaled)
