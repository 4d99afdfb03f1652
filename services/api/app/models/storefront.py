from __future__ import annotations

from pydantic import BaseModel, Field

from packages.shared.schemas.order_v1 import DeliveryTypeV1
from services.api.app.pos.catalog import UnitType


class StorefrontAddRequest(BaseModel):
    store_id: int
    product_id: int
    unit_type: UnitType = UnitType.BASE


class StorefrontQuantityRequest(BaseModel):
    delta: int


class StorefrontCheckoutRequest(BaseModel):
    name: str
    phone: str
    delivery_type: DeliveryTypeV1 = DeliveryTypeV1.DELIVERY
    address: str | None = None
    notes: str | None = None


class StorefrontLineOut(BaseModel):
    product_id: int
    name: str
    unit_type: UnitType
    quantity: int
    unit_price_cents: int
    line_total_cents: int
    currency: str


class StorefrontPartitionOut(BaseModel):
    store_id: int
    lines: list[StorefrontLineOut] = Field(default_factory=list)
    item_count: int
    total_cents: int


class StorefrontCartOut(BaseModel):
    cart_id: str
    item_count: int
    stores: list[StorefrontPartitionOut] = Field(default_factory=list)


class StorefrontOrderResponse(BaseModel):
    status: str
    order_number: str
    store_id: int
    subtotal_cents: int
    delivery_fee_cents: int
    total_cents: int
