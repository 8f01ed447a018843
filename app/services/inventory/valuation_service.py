# app/services/inventory/valuation_service.py
"""
Pricing arithmetic shared by the ledger, transfers and sales invoices.

Every monetary result is a Decimal rounded half-even to MONEY_PLACES.
Components are rounded first and totals are sums of the rounded
components, so a stored line always satisfies
total_price == net_of_discount + vat_amount.
"""

from decimal import Decimal
from typing import Iterable, NamedTuple

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.utils.decimal_utils import HUNDRED, ZERO, quantize_money, to_decimal


class LineTotals(NamedTuple):
    gross: Decimal
    discount_amount: Decimal
    net_of_discount: Decimal
    vat_amount: Decimal
    total_price: Decimal


class InvoiceTotals(NamedTuple):
    sub_total: Decimal
    discount_total: Decimal
    vat_total: Decimal
    tax_amount: Decimal
    net_amount: Decimal


def _invalid(message: str) -> AppException:
    return AppException(400, message, ErrorCode.INVALID_PRICING)


def _non_negative(value, field: str) -> Decimal:
    try:
        number = to_decimal(value)
    except ValueError:
        raise _invalid(f"{field} must be a number")
    if number < 0:
        raise _invalid(f"{field} cannot be negative")
    return number


def _percentage(value, field: str) -> Decimal:
    number = _non_negative(value, field)
    if number > HUNDRED:
        raise _invalid(f"{field} cannot exceed 100")
    return number


# =====================================================
# SELL PRICE
# =====================================================
def compute_sell_price(base_price, margin_percent) -> Decimal:
    base = _non_negative(base_price, "Base price")
    margin = _non_negative(margin_percent, "Margin percentage")
    return quantize_money(base + base * margin / HUNDRED)


# =====================================================
# CURRENCY CONVERSION
# =====================================================
def convert_price(unit_price, exchange_rate) -> Decimal:
    price = _non_negative(unit_price, "Unit price")
    try:
        rate = to_decimal(exchange_rate)
    except ValueError:
        raise _invalid("Exchange rate must be a number")
    if rate <= 0:
        raise _invalid("Exchange rate must be greater than zero")
    return quantize_money(price * rate)


# =====================================================
# INVOICE LINES
# =====================================================
def compute_line_total(
    quantity: int,
    unit_price,
    discount_percent=ZERO,
    vat_percent=ZERO,
) -> LineTotals:
    if quantity is None or quantity < 0:
        raise _invalid("Quantity cannot be negative")

    price = _non_negative(unit_price, "Unit price")
    discount = _percentage(discount_percent, "Discount percentage")
    vat = _non_negative(vat_percent, "VAT percentage")

    gross = quantize_money(price * quantity)
    discount_amount = quantize_money(gross * discount / HUNDRED)
    net_of_discount = gross - discount_amount
    vat_amount = quantize_money(net_of_discount * vat / HUNDRED)

    return LineTotals(
        gross=gross,
        discount_amount=discount_amount,
        net_of_discount=net_of_discount,
        vat_amount=vat_amount,
        total_price=net_of_discount + vat_amount,
    )


def summarize_lines(lines: Iterable[LineTotals], tax_amount=ZERO) -> InvoiceTotals:
    tax = _non_negative(tax_amount, "Tax amount")

    sub_total = discount_total = vat_total = ZERO
    for line in lines:
        sub_total += line.gross
        discount_total += line.discount_amount
        vat_total += line.vat_amount

    return InvoiceTotals(
        sub_total=quantize_money(sub_total),
        discount_total=quantize_money(discount_total),
        vat_total=quantize_money(vat_total),
        tax_amount=quantize_money(tax),
        net_amount=quantize_money(sub_total - discount_total + vat_total + tax),
    )
