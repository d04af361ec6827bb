"""
Чистые функции расчёта заказа.

Корзина не хранит итогов: количество и сумма всегда считаются заново
по текущему набору строк.
"""
from collections.abc import Iterable
from decimal import Decimal
from typing import Protocol

ZERO = Decimal("0")


class CartLine(Protocol):
    quantity: int
    total_price: Decimal


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    """Сумма строки: quantity × unit_price."""
    return Decimal(quantity) * Decimal(unit_price)


def recompute_drink_total(lines: Iterable[CartLine]) -> Decimal:
    """SUM(total_price) по строкам; для пустого набора 0."""
    return sum((Decimal(line.total_price) for line in lines), ZERO)


def cart_item_count(lines: Iterable[CartLine]) -> int:
    return sum(line.quantity for line in lines)


def cart_amount(lines: Iterable[CartLine]) -> Decimal:
    return recompute_drink_total(lines)
