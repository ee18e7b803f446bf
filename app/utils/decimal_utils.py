"""
Exact decimal arithmetic for money.

Every amount that enters the budget math goes through these helpers so that
sums of many small transactions never pick up binary floating point drift
(1000 x 0.01 is exactly 10.00 here).
"""
from decimal import Decimal, DivisionByZero, ROUND_HALF_UP, localcontext
from typing import Iterable, Union

Number = Union[Decimal, int, str, float]

# Matches the precision the ledger has always used for intermediate results
PRECISION = 20

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal; floats go through str() so 0.1 stays 0.1"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def add(a: Number, b: Number) -> Decimal:
    return to_decimal(a) + to_decimal(b)


def subtract(a: Number, b: Number) -> Decimal:
    return to_decimal(a) - to_decimal(b)


def multiply(a: Number, b: Number) -> Decimal:
    return to_decimal(a) * to_decimal(b)


def divide(a: Number, b: Number) -> Decimal:
    """Divide a by b. Raises DivisionByZero when b is exactly zero."""
    divisor = to_decimal(b)
    if divisor.is_zero():
        raise DivisionByZero("Division by zero")
    with localcontext() as ctx:
        ctx.prec = PRECISION
        ctx.rounding = ROUND_HALF_UP
        return to_decimal(a) / divisor


def percentage(part: Number, total: Number) -> Decimal:
    """
    Percentage of part relative to total.

    Returns 0 for a zero total instead of failing, e.g. percentage(50, 200) == 25.
    """
    if is_zero(total):
        return ZERO
    return multiply(divide(part, total), HUNDRED)


def round_decimal(value: Number, places: int = 2) -> Decimal:
    """Round half up to the given number of decimal places"""
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def compare(a: Number, b: Number) -> int:
    """-1 if a < b, 0 if equal, 1 if a > b"""
    left, right = to_decimal(a), to_decimal(b)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def is_zero(value: Number) -> bool:
    return to_decimal(value).is_zero()


def is_positive(value: Number) -> bool:
    return to_decimal(value) > ZERO


def is_negative(value: Number) -> bool:
    return to_decimal(value) < ZERO


def sum_decimals(values: Iterable[Number]) -> Decimal:
    total = ZERO
    for value in values:
        total = add(total, value)
    return total


def format_decimal(value: Number, places: int = 2) -> str:
    return str(round_decimal(value, places))


def format_currency(value: Number) -> str:
    """Format as USD, e.g. Decimal("-1234.5") -> "-$1,234.50" """
    rounded = round_decimal(value, 2)
    sign = "-" if rounded < ZERO else ""
    return f"{sign}${abs(rounded):,.2f}"


def parse_currency(value: str) -> Decimal:
    """Parse strings like "$1,234.56" into Decimal("1234.56")"""
    cleaned = value.replace("$", "").replace(",", "").strip()
    return Decimal(cleaned)
