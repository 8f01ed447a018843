# app/utils/decimal_utils.py
from decimal import Decimal, ROUND_HALF_EVEN, InvalidOperation

from app.core.config import MONEY_PLACES

ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not a decimal value: {value!r}")


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_EVEN)
