from __future__ import annotations

import pytest
from services.api.app.pos.cart import Cart
from services.api.app.pos.catalog import Product, UnitType
from services.api.app.pos.errors import (
    LineNotFoundError,
    StockExceededError,
    UnsupportedUnitTypeError,
)
from services.api.app.pos.pricing import PriceResolution, resolve_price


def _water(stock: int = 10) -> Product:
    return Product(
        product_id=1,
        sku="WAT-500",
        name="Water 500ml",
        base_unit="bottle",
        stock_in_base_units=stock,
        base_unit_price_cents=200,
        second_unit="pack",
        units_per_second_unit=5,
        second_unit_price_cents=900,
    )


def _chips() -> Product:
    return Product(
        product_id=3,
        sku="CHP-50",
        name="Chips 50g",
        base_unit="bag",
        stock_in_base_units=40,
        base_unit_price_cents=125,
    )


def _add(cart: Cart, product: Product, unit_type: UnitType = UnitType.BASE, times: int = 1) -> None:
    for _ in range(times):
        cart.add_line(product, unit_type, resolve_price(product, unit_type))


def _base_units_held(cart: Cart, product: Product) -> int:
    return cart.reserved_base_units(product.product_id)


def test_shared_stock_between_unit_types() -> None:
    cart = Cart()
    water = _water()

    _add(cart, water, UnitType.BASE, times=3)
    assert cart.total_cents == 600

    # (10 - 3) // 5 leaves room for exactly one pack.
    assert cart.max_quantity(water, UnitType.SECOND) == 1
    _add(cart, water, UnitType.SECOND)
    assert cart.total_cents == 1500

    assert cart.max_quantity(water, UnitType.BASE) == 5
    assert _base_units_held(cart, water) == 8


def test_repeated_add_merges_and_clamps_at_stock() -> None:
    cart = Cart()
    water = _water(stock=3)

    _add(cart, water, times=5)

    assert len(cart) == 1
    line = cart.get_line(1, UnitType.BASE)
    assert line is not None
    assert line.quantity == 3
    assert cart.remaining(water, UnitType.BASE) == 0


def test_new_line_without_stock_is_rejected() -> None:
    cart = Cart()
    water = _water(stock=4)

    with pytest.raises(StockExceededError):
        _add(cart, water, UnitType.SECOND)

    assert cart.is_empty


def test_second_unit_on_single_unit_product_is_rejected() -> None:
    cart = Cart()
    chips = _chips()

    with pytest.raises(UnsupportedUnitTypeError):
        cart.add_line(chips, UnitType.SECOND, PriceResolution(price_cents=100))

    assert cart.is_empty


def test_existing_line_keeps_captured_price() -> None:
    cart = Cart()
    water = _water()

    cart.add_line(water, UnitType.BASE, PriceResolution(price_cents=150, is_overridden=True))
    cart.add_line(water, UnitType.BASE, PriceResolution(price_cents=200))

    line = cart.get_line(1, UnitType.BASE)
    assert line is not None
    assert line.quantity == 2
    assert line.unit_price_cents == 150
    assert line.is_overridden is True


def test_update_quantity_within_ceiling() -> None:
    cart = Cart()
    water = _water()
    _add(cart, water)

    line = cart.update_quantity(1, UnitType.BASE, 4)

    assert line is not None
    assert line.quantity == 5


def test_update_quantity_over_ceiling_leaves_line_unchanged() -> None:
    cart = Cart()
    water = _water()
    _add(cart, water, UnitType.BASE, times=2)
    _add(cart, water, UnitType.SECOND)

    with pytest.raises(StockExceededError) as exc:
        cart.update_quantity(1, UnitType.BASE, 4)

    assert exc.value.available == 5
    line = cart.get_line(1, UnitType.BASE)
    assert line is not None
    assert line.quantity == 2


def test_update_quantity_to_zero_removes_line() -> None:
    cart = Cart()
    _add(cart, _water(), times=2)

    assert cart.update_quantity(1, UnitType.BASE, -2) is None
    assert cart.is_empty


def test_update_missing_line_raises() -> None:
    with pytest.raises(LineNotFoundError):
        Cart().update_quantity(1, UnitType.BASE, 1)


def test_remove_line_is_idempotent() -> None:
    cart = Cart()
    _add(cart, _water())

    cart.remove_line(1, UnitType.BASE)
    cart.remove_line(1, UnitType.BASE)

    assert cart.is_empty


def test_discount_is_clamped_to_unit_price() -> None:
    cart = Cart()
    _add(cart, _water(), times=2)

    line = cart.apply_discount(1, UnitType.BASE, 50)
    assert line.discount_cents == 50
    assert cart.subtotal_cents == 400
    assert cart.total_discount_cents == 100
    assert cart.total_cents == 300

    assert cart.apply_discount(1, UnitType.BASE, 999).discount_cents == 200
    assert cart.apply_discount(1, UnitType.BASE, -5).discount_cents == 0


def test_discount_never_goes_negative_on_free_lines() -> None:
    cart = Cart()
    cart.add_line(_chips(), UnitType.BASE, PriceResolution(price_cents=0, is_overridden=True))

    assert cart.apply_discount(3, UnitType.BASE, 50).discount_cents == 0
    assert cart.total_cents == 0


def test_discount_on_missing_line_raises() -> None:
    with pytest.raises(LineNotFoundError):
        Cart().apply_discount(1, UnitType.BASE, 10)


def test_stock_invariant_holds_across_mixed_operations() -> None:
    cart = Cart()
    water = _water(stock=17)

    operations = [
        ("add", UnitType.SECOND),
        ("add", UnitType.SECOND),
        ("add", UnitType.BASE),
        ("update", UnitType.BASE, 10),
        ("add", UnitType.SECOND),
        ("update", UnitType.SECOND, -1),
        ("update", UnitType.BASE, 6),
        ("add", UnitType.BASE),
        ("add", UnitType.SECOND),
    ]
    for op in operations:
        try:
            if op[0] == "add":
                _add(cart, water, op[1])
            else:
                cart.update_quantity(water.product_id, op[1], op[2])
        except StockExceededError:
            pass

        base = cart.get_line(1, UnitType.BASE)
        second = cart.get_line(1, UnitType.SECOND)
        base_qty = base.quantity if base else 0
        second_qty = second.quantity if second else 0
        assert base_qty + second_qty * 5 <= water.stock_in_base_units


def test_item_count_and_clear() -> None:
    cart = Cart()
    _add(cart, _water(), times=2)
    _add(cart, _chips(), times=3)

    assert cart.item_count == 5
    assert cart.total_cents == 2 * 200 + 3 * 125

    cart.clear()
    assert cart.is_empty
    assert cart.total_cents == 0
