from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from packages.shared.schemas.catalog_v1 import ProductV1
from services.api.app.pos.errors import ProductNotFoundError, UnsupportedUnitTypeError
from services.api.app.pos.money import to_cents


class UnitType(str, Enum):
    """Selling unit of a cart line. Values are the backend's wire names."""

    BASE = "piece"
    SECOND = "box"


@dataclass(frozen=True, slots=True)
class Product:
    product_id: int
    sku: str
    name: str
    base_unit: str
    stock_in_base_units: int
    base_unit_price_cents: int
    second_unit: str | None = None
    units_per_second_unit: int = 1
    second_unit_price_cents: int = 0
    barcode: str | None = None
    second_unit_barcode: str | None = None
    image_url: str | None = None
    store_id: int | None = None
    currency: str = "USD"

    @classmethod
    def from_wire(cls, row: ProductV1 | dict) -> Product:
        if not isinstance(row, ProductV1):
            row = ProductV1.model_validate(row)

        factor = row.units_per_second_unit or 0
        has_second = bool(row.second_unit) and factor >= 1

        return cls(
            product_id=row.product_id,
            sku=row.sku,
            name=row.name or row.sku,
            base_unit=row.base_unit,
            stock_in_base_units=max(0, math.floor(row.stock_in_base_units)),
            base_unit_price_cents=to_cents(row.base_unit_price),
            second_unit=row.second_unit if has_second else None,
            units_per_second_unit=factor if has_second else 1,
            second_unit_price_cents=to_cents(row.second_unit_price),
            barcode=row.barcode or None,
            second_unit_barcode=row.second_unit_barcode or None,
            image_url=row.image_url,
            store_id=row.store_id,
            currency=row.currency,
        )

    @property
    def has_second_unit(self) -> bool:
        return self.second_unit is not None and self.units_per_second_unit >= 1

    def units_per(self, unit_type: UnitType) -> int:
        """Base units consumed by one unit of ``unit_type``."""

        if unit_type == UnitType.BASE:
            return 1
        if not self.has_second_unit:
            raise UnsupportedUnitTypeError(self.product_id, UnitType(unit_type).value)
        return self.units_per_second_unit

    def catalog_price_cents(self, unit_type: UnitType) -> int:
        if unit_type == UnitType.BASE:
            return self.base_unit_price_cents
        self.units_per(unit_type)
        return self.second_unit_price_cents

    def unit_label(self, unit_type: UnitType) -> str:
        if unit_type == UnitType.SECOND and self.second_unit:
            return self.second_unit
        return self.base_unit

    def available(self, unit_type: UnitType, reserved_base_units: int = 0) -> int:
        """Whole units of ``unit_type`` left once ``reserved_base_units`` are taken."""

        free = max(0, self.stock_in_base_units - reserved_base_units)
        return free // self.units_per(unit_type)


class CatalogSnapshot:
    """Read-only product list loaded when a sale session starts."""

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products: dict[int, Product] = {}
        for product in products:
            self._products[product.product_id] = product

    @classmethod
    def from_wire(cls, rows: Iterable[ProductV1 | dict]) -> CatalogSnapshot:
        return cls(Product.from_wire(row) for row in rows)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products.values())

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def get(self, product_id: int) -> Product:
        product = self._products.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def lookup_code(self, code: str) -> tuple[Product, UnitType]:
        """Resolve a scanned barcode or a typed SKU.

        A piece barcode or SKU selects the base unit, a box barcode selects the second unit.
        """

        code = (code or "").strip()
        if not code:
            raise ProductNotFoundError(code)

        for product in self._products.values():
            if product.barcode == code:
                return product, UnitType.BASE
            if product.second_unit_barcode == code:
                return product, UnitType.SECOND

        lowered = code.lower()
        for product in self._products.values():
            if product.sku.lower() == lowered:
                return product, UnitType.BASE

        raise ProductNotFoundError(code)

    def search(self, text: str | None) -> list[Product]:
        needle = (text or "").strip().lower()
        if not needle:
            return list(self._products.values())

        return [
            p
            for p in self._products.values()
            if needle in p.name.lower()
            or needle in p.sku.lower()
            or (p.barcode is not None and needle in p.barcode)
        ]

    def quick_products(self, limit: int = 6) -> list[Product]:
        return [p for p in self._products.values() if p.stock_in_base_units > 0][:limit]

    def for_store(self, store_id: int) -> CatalogSnapshot:
        return CatalogSnapshot(p for p in self._products.values() if p.store_id == store_id)
