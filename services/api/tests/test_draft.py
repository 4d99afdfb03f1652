from __future__ import annotations

from datetime import datetime, timezone

import pytest
from packages.shared.schemas.order_v1 import PaymentTypeV1
from services.api.app.pos.cart import Cart
from services.api.app.pos.catalog import Product, UnitType
from services.api.app.pos.customers import Customer
from services.api.app.pos.draft import OrderMetadata, build_order_draft, build_receipt
from services.api.app.pos.errors import (
    EmptyCartError,
    InvalidSplitAmountError,
    NoCustomerSelectedError,
)
from services.api.app.pos.payment import PaymentAllocator, PaymentMethod
from services.api.app.pos.pricing import resolve_price

WATER = Product(
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

CUSTOMER = Customer(
    customer_id=101,
    name="Corner Market",
    current_balance_cents=12000,
    credit_limit_cents=50000,
)


def _cart() -> Cart:
    cart = Cart()
    for _ in range(3):
        cart.add_line(WATER, UnitType.BASE, resolve_price(WATER, UnitType.BASE))
    cart.add_line(WATER, UnitType.SECOND, resolve_price(WATER, UnitType.SECOND))
    cart.apply_discount(1, UnitType.BASE, 20)
    return cart


def test_empty_cart_is_rejected_without_side_effects() -> None:
    cart = Cart()

    with pytest.raises(EmptyCartError):
        build_order_draft(cart, PaymentAllocator(), customer=CUSTOMER)

    assert cart.is_empty
    assert len(cart) == 0


def test_customer_is_required_unless_metadata_says_otherwise() -> None:
    with pytest.raises(NoCustomerSelectedError):
        build_order_draft(_cart(), PaymentAllocator())

    draft = build_order_draft(_cart(), PaymentAllocator(), OrderMetadata(requires_customer=False))
    assert draft.customer_id is None


def test_draft_snapshot_and_purity() -> None:
    cart = _cart()
    allocator = PaymentAllocator()
    allocator.select(PaymentMethod.SPLIT, cart.total_cents)
    allocator.set_cash_amount(1000)

    first = build_order_draft(cart, allocator, OrderMetadata(notes="leave at back"), CUSTOMER)
    second = build_order_draft(cart, allocator, OrderMetadata(notes="leave at back"), CUSTOMER)

    assert first == second
    assert cart.item_count == 4

    assert first.subtotal_cents == 1500
    assert first.discount_cents == 60
    assert first.total_cents == 1440
    assert first.payment.cash_amount_cents == 1000
    assert first.payment.credit_amount_cents == 440
    assert [line.line_total_cents for line in first.lines] == [540, 900]


def test_invalid_split_blocks_the_draft() -> None:
    cart = _cart()
    allocator = PaymentAllocator()
    allocator.select(PaymentMethod.SPLIT, cart.total_cents)
    allocator.enter_cash_amount("$60")

    with pytest.raises(InvalidSplitAmountError):
        build_order_draft(cart, allocator, customer=CUSTOMER)


def test_submission_wire_shape() -> None:
    allocator = PaymentAllocator()
    allocator.select(PaymentMethod.CREDIT)

    draft = build_order_draft(_cart(), allocator, OrderMetadata(notes="  "), CUSTOMER)
    payload = draft.to_submission().model_dump(by_alias=True, exclude_none=True, mode="json")

    assert payload == {
        "customerId": 101,
        "paymentType": "credit",
        "cashAmount": 0.0,
        "items": [
            {
                "productId": 1,
                "quantity": 3,
                "unitType": "piece",
                "unitPrice": 2.0,
                "discount": 0.2,
            },
            {
                "productId": 1,
                "quantity": 1,
                "unitType": "box",
                "unitPrice": 9.0,
                "discount": 0.0,
            },
        ],
    }


def test_receipt_projects_customer_balance() -> None:
    allocator = PaymentAllocator()
    allocator.select(PaymentMethod.SPLIT)
    allocator.set_cash_amount(440)

    draft = build_order_draft(_cart(), allocator, customer=CUSTOMER)
    issued_at = datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc)
    receipt = build_receipt(draft, "ORD-00001", CUSTOMER, issued_at=issued_at)

    assert receipt.order_number == "ORD-00001"
    assert receipt.issued_at == issued_at.isoformat()
    assert receipt.customer_name == "Corner Market"
    assert receipt.payment_type == PaymentTypeV1.SPLIT
    assert receipt.item_count == 4
    assert receipt.total_cents == 1440
    assert receipt.cash_amount_cents == 440
    assert receipt.credit_amount_cents == 1000
    assert receipt.previous_balance_cents == 12000
    assert receipt.projected_balance_cents == 13000
    assert receipt.lines[1].unit_label == "pack"


def test_receipt_without_customer_has_no_balance() -> None:
    draft = build_order_draft(
        _cart(), PaymentAllocator(), OrderMetadata(requires_customer=False)
    )
    receipt = build_receipt(draft, "ORD-00002")

    assert receipt.previous_balance_cents is None
    assert receipt.projected_balance_cents is None
