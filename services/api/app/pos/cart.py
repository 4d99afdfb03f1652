"""In-memory sale cart.

Lines are keyed by (product_id, unit_type). Both unit-type lines of one product draw on
the same base-unit stock, so a line's ceiling is whatever its sibling has not already
taken: ``base_qty + second_qty * factor <= stock`` holds after every call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from services.api.app.pos.catalog import Product, UnitType
from services.api.app.pos.errors import LineNotFoundError, StockExceededError
from services.api.app.pos.pricing import PriceResolution

logger = logging.getLogger(__name__)

LineKey = tuple[int, UnitType]


@dataclass(slots=True)
class CartLine:
    product: Product
    unit_type: UnitType
    quantity: int
    unit_price_cents: int
    discount_cents: int = 0
    is_overridden: bool = False

    @property
    def key(self) -> LineKey:
        return (self.product.product_id, self.unit_type)

    @property
    def subtotal_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    @property
    def discount_total_cents(self) -> int:
        return self.discount_cents * self.quantity

    @property
    def total_cents(self) -> int:
        return self.subtotal_cents - self.discount_total_cents

    @property
    def base_units(self) -> int:
        return self.quantity * self.product.units_per(self.unit_type)


def _sibling(unit_type: UnitType) -> UnitType:
    return UnitType.SECOND if unit_type == UnitType.BASE else UnitType.BASE


class Cart:
    def __init__(self, store_id: int | None = None) -> None:
        self.store_id = store_id
        self._lines: dict[LineKey, CartLine] = {}

    def __iter__(self) -> Iterator[CartLine]:
        return iter(list(self._lines.values()))

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def get_line(self, product_id: int, unit_type: UnitType) -> CartLine | None:
        return self._lines.get((product_id, UnitType(unit_type)))

    def reserved_base_units(self, product_id: int, unit_type: UnitType | None = None) -> int:
        """Base units held by lines of ``product_id``, optionally for one unit type only."""

        return sum(
            line.base_units
            for line in self._lines.values()
            if line.product.product_id == product_id
            and (unit_type is None or line.unit_type == unit_type)
        )

    def max_quantity(self, product: Product, unit_type: UnitType) -> int:
        """Largest quantity the ``unit_type`` line of ``product`` may hold."""

        unit_type = UnitType(unit_type)
        held_by_sibling = 0
        if product.has_second_unit:
            held_by_sibling = self.reserved_base_units(product.product_id, _sibling(unit_type))
        return product.available(unit_type, reserved_base_units=held_by_sibling)

    def remaining(self, product: Product, unit_type: UnitType) -> int:
        line = self.get_line(product.product_id, unit_type)
        current = line.quantity if line is not None else 0
        return max(0, self.max_quantity(product, unit_type) - current)

    def add_line(self, product: Product, unit_type: UnitType, price: PriceResolution) -> CartLine:
        """Add one unit. Repeated adds merge into the existing line.

        An existing line is clamped at its stock ceiling without error and keeps the price
        it was first added with. A new line needs at least one unit of free stock.
        """

        unit_type = UnitType(unit_type)
        ceiling = self.max_quantity(product, unit_type)

        line = self._lines.get((product.product_id, unit_type))
        if line is not None:
            if line.quantity < ceiling:
                line.quantity += 1
            else:
                logger.debug(
                    "clamped add for product %s (%s) at %s",
                    product.product_id,
                    unit_type.value,
                    ceiling,
                )
            return line

        if ceiling < 1:
            raise StockExceededError(product.product_id, requested=1, available=ceiling)

        line = CartLine(
            product=product,
            unit_type=unit_type,
            quantity=1,
            unit_price_cents=price.price_cents,
            discount_cents=0,
            is_overridden=price.is_overridden,
        )
        self._lines[line.key] = line
        return line

    def update_quantity(self, product_id: int, unit_type: UnitType, delta: int) -> CartLine | None:
        """Change a line's quantity by ``delta``.

        Returns the updated line, or None when the line dropped to zero and was removed.
        Raises ``StockExceededError`` (line unchanged) when the new quantity is over the
        ceiling.
        """

        unit_type = UnitType(unit_type)
        line = self._lines.get((product_id, unit_type))
        if line is None:
            raise LineNotFoundError(product_id, unit_type.value)

        new_qty = line.quantity + delta
        if new_qty <= 0:
            del self._lines[line.key]
            return None

        ceiling = self.max_quantity(line.product, unit_type)
        if new_qty > ceiling:
            logger.debug(
                "rejected quantity %s for product %s (%s), ceiling %s",
                new_qty,
                product_id,
                unit_type.value,
                ceiling,
            )
            raise StockExceededError(product_id, requested=new_qty, available=ceiling)

        line.quantity = new_qty
        return line

    def remove_line(self, product_id: int, unit_type: UnitType) -> None:
        self._lines.pop((product_id, UnitType(unit_type)), None)

    def apply_discount(self, product_id: int, unit_type: UnitType, per_unit_cents: int) -> CartLine:
        unit_type = UnitType(unit_type)
        line = self._lines.get((product_id, unit_type))
        if line is None:
            raise LineNotFoundError(product_id, unit_type.value)

        line.discount_cents = max(0, min(per_unit_cents, line.unit_price_cents))
        return line

    def clear(self) -> None:
        self._lines.clear()

    @property
    def subtotal_cents(self) -> int:
        return sum(line.subtotal_cents for line in self._lines.values())

    @property
    def total_discount_cents(self) -> int:
        return sum(line.discount_total_cents for line in self._lines.values())

    @property
    def total_cents(self) -> int:
        return self.subtotal_cents - self.total_discount_cents

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())
