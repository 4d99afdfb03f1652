from __future__ import annotations

from pydantic import BaseModel, Field

from packages.shared.schemas.order_v1 import DeliveryTypeV1
from packages.shared.schemas.receipt_v1 import ReceiptV1
from services.api.app.pos.catalog import UnitType
from services.api.app.pos.payment import PaymentMethod


class OrderDraftRequest(BaseModel):
    notes: str | None = None
    delivery_type: DeliveryTypeV1 | None = None
    address: str | None = None


class DraftLineOut(BaseModel):
    product_id: int
    name: str
    unit_type: UnitType
    quantity: int
    unit_price_cents: int
    discount_cents: int
    line_total_cents: int


class OrderDraftResponse(BaseModel):
    session_id: str
    customer_id: int | None = None
    lines: list[DraftLineOut]
    item_count: int
    subtotal_cents: int
    discount_cents: int
    total_cents: int
    payment_type: PaymentMethod
    cash_amount_cents: int
    credit_amount_cents: int
    notes: str | None = None

    # Exactly what will be posted to the backend.
    submission: dict = Field(default_factory=dict)


class OrderSubmitResponse(BaseModel):
    status: str
    order_number: str
    receipt: ReceiptV1
