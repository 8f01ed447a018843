from decimal import Decimal

import pytest

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.services.inventory.valuation_service import (
    compute_sell_price,
    compute_line_total,
    convert_price,
    summarize_lines,
)
from app.utils.decimal_utils import quantize_money


def test_sell_price_adds_margin():
    assert compute_sell_price(100, 20) == Decimal("120.00")
    assert compute_sell_price("19.99", "10") == Decimal("21.99")
    assert compute_sell_price(Decimal("80"), 0) == Decimal("80.00")


@pytest.mark.parametrize("base, margin", [(-1, 10), (100, -5), ("abc", 10)])
def test_sell_price_rejects_bad_input(base, margin):
    with pytest.raises(AppException) as exc:
        compute_sell_price(base, margin)
    assert exc.value.status_code == 400
    assert exc.value.error_code == ErrorCode.INVALID_PRICING


def test_line_total_reference_values():
    line = compute_line_total(3, 50, 10, 5)

    assert line.gross == Decimal("150.00")
    assert line.discount_amount == Decimal("15.00")
    assert line.net_of_discount == Decimal("135.00")
    assert line.vat_amount == Decimal("6.75")
    assert line.total_price == Decimal("141.75")


def test_line_total_stays_consistent_after_rounding():
    line = compute_line_total(3, "33.33", "7.5", "5")

    assert line.gross == Decimal("99.99")
    assert line.net_of_discount == line.gross - line.discount_amount
    assert line.total_price == line.net_of_discount + line.vat_amount


@pytest.mark.parametrize(
    "kwargs",
    [
        {"quantity": -1, "unit_price": 10},
        {"quantity": 1, "unit_price": -10},
        {"quantity": 1, "unit_price": 10, "discount_percent": 101},
        {"quantity": 1, "unit_price": 10, "discount_percent": -1},
        {"quantity": 1, "unit_price": 10, "vat_percent": -5},
    ],
)
def test_line_total_rejects_out_of_range(kwargs):
    with pytest.raises(AppException) as exc:
        compute_line_total(**kwargs)
    assert exc.value.error_code == ErrorCode.INVALID_PRICING


def test_convert_price():
    assert convert_price(100, "0.044") == Decimal("4.40")
    assert convert_price("12.50", 2) == Decimal("25.00")

    with pytest.raises(AppException):
        convert_price(100, 0)
    with pytest.raises(AppException):
        convert_price(100, "-1")


def test_money_rounds_half_even():
    assert quantize_money(Decimal("0.125")) == Decimal("0.12")
    assert quantize_money(Decimal("0.135")) == Decimal("0.14")
    assert quantize_money("2.5") == Decimal("2.50")


def test_summarize_lines_with_tax():
    lines = [
        compute_line_total(3, 50, 10, 5),
        compute_line_total(1, "200", 0, 0),
    ]

    totals = summarize_lines(lines, tax_amount="10")

    assert totals.sub_total == Decimal("350.00")
    assert totals.discount_total == Decimal("15.00")
    assert totals.vat_total == Decimal("6.75")
    assert totals.tax_amount == Decimal("10.00")
    assert totals.net_amount == Decimal("351.75")


def test_summarize_lines_rejects_negative_tax():
    with pytest.raises(AppException):
        summarize_lines([], tax_amount=-1)


def test_vat_is_not_capped_at_one_hundred():
    line = compute_line_total(1, 100, 0, 150)

    assert line.vat_amount == Decimal("150.00")
    assert line.total_price == Decimal("250.00")
