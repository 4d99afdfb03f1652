from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from packages.shared.schemas.catalog_v1 import CustomerPriceOverrideV1
from services.api.app.pos.catalog import Product, UnitType
from services.api.app.pos.money import to_cents


@dataclass(frozen=True, slots=True)
class PriceOverride:
    product_id: int
    base_unit_price_cents: int | None = None
    second_unit_price_cents: int | None = None
    base_unit_active: bool = True
    second_unit_active: bool = True

    @classmethod
    def from_wire(cls, row: CustomerPriceOverrideV1 | dict) -> PriceOverride:
        if not isinstance(row, CustomerPriceOverrideV1):
            row = CustomerPriceOverrideV1.model_validate(row)

        base = to_cents(row.base_unit_override) if row.base_unit_override is not None else None
        second = (
            to_cents(row.second_unit_override) if row.second_unit_override is not None else None
        )

        base_active = row.has_base_unit_override
        second_active = row.has_second_unit_override

        return cls(
            product_id=row.product_id,
            base_unit_price_cents=base,
            second_unit_price_cents=second,
            base_unit_active=base is not None if base_active is None else base_active,
            second_unit_active=second is not None if second_active is None else second_active,
        )

    def price_for(self, unit_type: UnitType) -> int | None:
        """Override price for ``unit_type``, or None when it should not apply."""

        if unit_type == UnitType.BASE:
            return self.base_unit_price_cents if self.base_unit_active else None
        return self.second_unit_price_cents if self.second_unit_active else None


class PriceOverrides(Mapping[int, PriceOverride]):
    """Per-customer special prices keyed by product id.

    An empty snapshot stands for "no customer attached".
    """

    def __init__(self, overrides: Iterable[PriceOverride] = ()) -> None:
        self._by_product: dict[int, PriceOverride] = {o.product_id: o for o in overrides}

    @classmethod
    def from_wire(cls, rows: Iterable[CustomerPriceOverrideV1 | dict]) -> PriceOverrides:
        return cls(PriceOverride.from_wire(row) for row in rows)

    def __getitem__(self, product_id: int) -> PriceOverride:
        return self._by_product[product_id]

    def __iter__(self):
        return iter(self._by_product)

    def __len__(self) -> int:
        return len(self._by_product)


@dataclass(frozen=True, slots=True)
class PriceResolution:
    price_cents: int
    is_overridden: bool = False


def resolve_price(
    product: Product,
    unit_type: UnitType,
    overrides: Mapping[int, PriceOverride] | None = None,
) -> PriceResolution:
    """Effective unit price for ``product`` sold by ``unit_type``.

    Raises ``UnsupportedUnitTypeError`` for the second unit of a product that has none.
    """

    catalog_price = product.catalog_price_cents(unit_type)

    override = overrides.get(product.product_id) if overrides else None
    if override is not None:
        price = override.price_for(unit_type)
        if price is not None:
            return PriceResolution(price_cents=price, is_overridden=True)

    return PriceResolution(price_cents=catalog_price, is_overridden=False)
