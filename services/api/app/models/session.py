from __future__ import annotations

from pydantic import BaseModel, Field

from services.api.app.pos.catalog import UnitType
from services.api.app.pos.payment import PaymentMethod


class SessionOpenRequest(BaseModel):
    driver_id: str = Field(..., min_length=1)


class AttachCustomerRequest(BaseModel):
    customer_id: int


class AddLineRequest(BaseModel):
    product_id: int
    unit_type: UnitType = UnitType.BASE


class ScanRequest(BaseModel):
    code: str = Field(..., min_length=1)


class UpdateQuantityRequest(BaseModel):
    delta: int


class DiscountRequest(BaseModel):
    per_unit_discount_cents: int


class PaymentSelectRequest(BaseModel):
    method: PaymentMethod
    # Only read for split payments.
    cash_amount_cents: int | None = None


class CustomerOut(BaseModel):
    customer_id: int
    name: str
    phone: str | None = None
    current_balance_cents: int
    credit_limit_cents: int


class CartLineOut(BaseModel):
    product_id: int
    name: str
    sku: str
    unit_type: UnitType
    unit_label: str
    quantity: int
    unit_price_cents: int
    discount_cents: int
    line_total_cents: int
    is_overridden: bool
    max_quantity: int


class PaymentOut(BaseModel):
    method: PaymentMethod
    cash_amount_cents: int
    credit_amount_cents: int


class SessionOut(BaseModel):
    session_id: str
    driver_id: str
    customer: CustomerOut | None = None

    lines: list[CartLineOut] = Field(default_factory=list)
    item_count: int
    subtotal_cents: int
    discount_cents: int
    total_cents: int

    payment: PaymentOut


class UnitAvailabilityOut(BaseModel):
    unit_type: UnitType
    unit_label: str
    price_cents: int
    is_overridden: bool
    remaining: int


class CatalogItemOut(BaseModel):
    product_id: int
    sku: str
    name: str
    image_url: str | None = None
    stock_in_base_units: int
    units: list[UnitAvailabilityOut] = Field(default_factory=list)
