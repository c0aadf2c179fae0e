"""Integer money utilities.

All fares, shares and balances are int in the smallest currency unit.
Fractional intermediates (per-km rates times fractional distances,
multipliers) are carried as Decimal and rounded exactly once.
"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: Decimal) -> int:
    """Round to the nearest unit, halves away from zero: 2.5 -> 3, -2.5 -> -3."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_amount(amount: int, currency: str) -> str:
    """Display string with space-grouped thousands: -15000 -> '-15 000 XOF'."""
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,}".replace(",", " ")
    return f"{sign}{grouped} {currency}"


def to_decimal(value: object) -> Decimal:
    """Convert an int/float/str/Decimal to Decimal without binary float noise.

    Raises TypeError for bools and non-numeric types, ValueError for
    unparsable strings.
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric amount")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except ArithmeticError as exc:
            raise ValueError(f"not a number: {value!r}") from exc
    raise TypeError(f"not a number: {type(value).__name__}")
