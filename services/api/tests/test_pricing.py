from __future__ import annotations

import pytest
from services.api.app.pos.catalog import Product, UnitType
from services.api.app.pos.errors import UnsupportedUnitTypeError
from services.api.app.pos.pricing import PriceOverride, PriceOverrides, resolve_price


def _water() -> Product:
    return Product(
        product_id=1,
        sku="WAT-500",
        name="Water 500ml",
        base_unit="bottle",
        stock_in_base_units=10,
        base_unit_price_cents=200,
        second_unit="pack",
        units_per_second_unit=5,
        second_unit_price_cents=900,
    )


def test_override_wins_for_base_unit() -> None:
    overrides = PriceOverrides.from_wire([{"productId": 1, "baseUnitOverride": "1.50"}])

    price = resolve_price(_water(), UnitType.BASE, overrides)

    assert price.price_cents == 150
    assert price.is_overridden is True


def test_override_for_one_unit_leaves_the_other_on_catalog_price() -> None:
    overrides = PriceOverrides.from_wire([{"productId": 1, "baseUnitOverride": 1.5}])

    price = resolve_price(_water(), UnitType.SECOND, overrides)

    assert price.price_cents == 900
    assert price.is_overridden is False


def test_inactive_override_is_ignored() -> None:
    overrides = PriceOverrides.from_wire(
        [{"productId": 1, "specialPrice": 1.5, "hasSpecialPrice": False}]
    )

    assert resolve_price(_water(), UnitType.BASE, overrides).price_cents == 200


def test_second_unit_override() -> None:
    overrides = PriceOverrides(
        [PriceOverride(product_id=1, second_unit_price_cents=800, base_unit_active=False)]
    )

    price = resolve_price(_water(), UnitType.SECOND, overrides)

    assert price.price_cents == 800
    assert price.is_overridden is True


def test_no_overrides_uses_catalog_price() -> None:
    assert resolve_price(_water(), UnitType.BASE).price_cents == 200
    assert resolve_price(_water(), UnitType.BASE, PriceOverrides()).is_overridden is False


def test_override_for_other_product_does_not_apply() -> None:
    overrides = PriceOverrides.from_wire([{"productId": 2, "baseUnitOverride": 0.10}])
    assert resolve_price(_water(), UnitType.BASE, overrides).price_cents == 200


def test_second_unit_without_one_is_rejected() -> None:
    chips = Product(
        product_id=3,
        sku="CHP-50",
        name="Chips",
        base_unit="bag",
        stock_in_base_units=40,
        base_unit_price_cents=125,
    )
    with pytest.raises(UnsupportedUnitTypeError):
        resolve_price(chips, UnitType.SECOND)
