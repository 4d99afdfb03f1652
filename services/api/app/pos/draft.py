"""Order draft builder.

``build_order_draft`` is a pure function of cart + allocator + metadata. It never touches
the cart: clearing it is the caller's job once the backend has accepted the order, so a
failed submission can simply be retried.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from packages.shared.schemas.order_v1 import (
    DeliveryTypeV1,
    OrderItemV1,
    OrderSubmissionV1,
    PaymentTypeV1,
)
from packages.shared.schemas.receipt_v1 import ReceiptLineV1, ReceiptV1
from services.api.app.pos.cart import Cart
from services.api.app.pos.catalog import UnitType
from services.api.app.pos.customers import Customer
from services.api.app.pos.errors import EmptyCartError, NoCustomerSelectedError
from services.api.app.pos.money import to_major
from services.api.app.pos.payment import PaymentAllocation, PaymentAllocator


@dataclass(frozen=True, slots=True)
class OrderMetadata:
    notes: str | None = None
    delivery_type: DeliveryTypeV1 | None = None
    address: str | None = None
    requires_customer: bool = True


@dataclass(frozen=True, slots=True)
class DraftLine:
    product_id: int
    name: str
    sku: str
    unit_type: UnitType
    unit_label: str
    quantity: int
    unit_price_cents: int
    discount_cents: int

    @property
    def line_total_cents(self) -> int:
        return (self.unit_price_cents - self.discount_cents) * self.quantity


@dataclass(frozen=True, slots=True)
class OrderDraft:
    customer_id: int | None
    lines: tuple[DraftLine, ...]
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    payment: PaymentAllocation
    metadata: OrderMetadata
    store_id: int | None = None

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def to_submission(self) -> OrderSubmissionV1:
        return OrderSubmissionV1(
            customer_id=self.customer_id,
            payment_type=PaymentTypeV1(self.payment.method.value),
            cash_amount=to_major(self.payment.cash_amount_cents),
            notes=(self.metadata.notes or "").strip() or None,
            items=[
                OrderItemV1(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_type=line.unit_type.value,
                    unit_price=to_major(line.unit_price_cents),
                    discount=to_major(line.discount_cents),
                )
                for line in self.lines
            ],
        )


def build_order_draft(
    cart: Cart,
    allocator: PaymentAllocator,
    metadata: OrderMetadata | None = None,
    customer: Customer | None = None,
) -> OrderDraft:
    metadata = metadata or OrderMetadata()

    if cart.is_empty:
        raise EmptyCartError()
    if metadata.requires_customer and customer is None:
        raise NoCustomerSelectedError()

    total = cart.total_cents
    allocation = allocator.validate(total, customer)

    lines = tuple(
        DraftLine(
            product_id=line.product.product_id,
            name=line.product.name,
            sku=line.product.sku,
            unit_type=line.unit_type,
            unit_label=line.product.unit_label(line.unit_type),
            quantity=line.quantity,
            unit_price_cents=line.unit_price_cents,
            discount_cents=line.discount_cents,
        )
        for line in cart
    )

    return OrderDraft(
        customer_id=customer.customer_id if customer is not None else None,
        lines=lines,
        subtotal_cents=cart.subtotal_cents,
        discount_cents=cart.total_discount_cents,
        total_cents=total,
        payment=allocation,
        metadata=metadata,
        store_id=cart.store_id,
    )


def build_receipt(
    draft: OrderDraft,
    order_number: str,
    customer: Customer | None = None,
    issued_at: datetime | None = None,
) -> ReceiptV1:
    issued_at = issued_at or datetime.now(timezone.utc)

    previous = customer.current_balance_cents if customer is not None else None
    projected = previous + draft.payment.credit_amount_cents if previous is not None else None

    return ReceiptV1(
        order_number=order_number,
        issued_at=issued_at.isoformat(),
        customer_id=draft.customer_id,
        customer_name=customer.name if customer is not None else None,
        lines=[
            ReceiptLineV1(
                product_id=line.product_id,
                name=line.name,
                sku=line.sku,
                unit_type=line.unit_type.value,
                unit_label=line.unit_label,
                quantity=line.quantity,
                unit_price_cents=line.unit_price_cents,
                discount_cents=line.discount_cents,
                line_total_cents=line.line_total_cents,
            )
            for line in draft.lines
        ],
        item_count=draft.item_count,
        subtotal_cents=draft.subtotal_cents,
        discount_cents=draft.discount_cents,
        total_cents=draft.total_cents,
        payment_type=PaymentTypeV1(draft.payment.method.value),
        cash_amount_cents=draft.payment.cash_amount_cents,
        credit_amount_cents=draft.payment.credit_amount_cents,
        previous_balance_cents=previous,
        projected_balance_cents=projected,
        notes=draft.metadata.notes,
    )
