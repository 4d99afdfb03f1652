"""Shared receipt payload schema (v1).

The driver app prints this after a sale is accepted. Rendering and printing belong to the
clients; this is only the data they need.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from packages.shared.schemas.order_v1 import PaymentTypeV1


class ReceiptLineV1(BaseModel):
    product_id: int
    name: str
    sku: str
    unit_type: str
    unit_label: str
    quantity: int
    unit_price_cents: int
    discount_cents: int
    line_total_cents: int


class ReceiptV1(BaseModel):
    version: str = "1"
    order_number: str
    issued_at: str

    customer_id: int | None = None
    customer_name: str | None = None

    lines: list[ReceiptLineV1] = Field(default_factory=list)
    item_count: int

    subtotal_cents: int
    discount_cents: int
    total_cents: int

    payment_type: PaymentTypeV1
    cash_amount_cents: int
    credit_amount_cents: int

    # Balance the customer will carry once the backend books the credit portion.
    previous_balance_cents: int | None = None
    projected_balance_cents: int | None = None

    notes: str | None = None
