from collections import namedtuple
from dataclasses import dataclass
from decimal import Decimal

from app.services.cart import (
    cart_amount,
    cart_item_count,
    line_total,
    recompute_drink_total,
)


@dataclass
class Line:
    quantity: int
    total_price: Decimal


# ----------------------
# 🔹 Line totals
# ----------------------
def test_line_total_multiplies_quantity_by_unit_price():
    assert line_total(3, Decimal("120.50")) == Decimal("361.50")


def test_line_total_accepts_integer_price():
    assert line_total(2, 100) == Decimal("200")


# ----------------------
# 🔹 Drink total
# ----------------------
def test_recompute_drink_total_of_empty_cart_is_zero():
    assert recompute_drink_total([]) == Decimal("0")


def test_recompute_drink_total_sums_line_totals():
    lines = [Line(2, Decimal("200.00")), Line(1, Decimal("350.00"))]
    assert recompute_drink_total(lines) == Decimal("550.00")


def test_recompute_drink_total_accepts_row_tuples():
    # так строки приходят из select(quantity, total_price)
    Row = namedtuple("Row", "quantity total_price")
    assert recompute_drink_total([Row(1, Decimal("10")), Row(4, Decimal("40"))]) == Decimal("50")


# ----------------------
# 🔹 Cart summary
# ----------------------
def test_cart_item_count_counts_units_not_lines():
    lines = [Line(2, Decimal("200")), Line(3, Decimal("90"))]
    assert cart_item_count(lines) == 5


def test_cart_amount_matches_drink_total():
    lines = [Line(2, Decimal("200")), Line(3, Decimal("90"))]
    assert cart_amount(lines) == recompute_drink_total(lines) == Decimal("290")
