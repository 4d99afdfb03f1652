"""Shared outbound submission schema (v1).

The backend owns order numbers, balances and stock. These payloads are exactly what the
apps post to it; dump them with ``model_dump(by_alias=True, exclude_none=True)``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PaymentTypeV1(str, Enum):
    CASH = "cash"
    CREDIT = "credit"
    SPLIT = "split"


class CollectionPaymentTypeV1(str, Enum):
    CASH = "cash"
    CHECK = "check"


class DeliveryTypeV1(str, Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


class OrderItemV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="productId")
    quantity: int = Field(..., ge=1)
    unit_type: str = Field(alias="unitType")
    unit_price: float = Field(alias="unitPrice")
    discount: float = 0.0


class OrderSubmissionV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: int | None = Field(None, alias="customerId")
    payment_type: PaymentTypeV1 = Field(alias="paymentType")
    cash_amount: float = Field(alias="cashAmount")
    notes: str | None = None
    items: list[OrderItemV1] = Field(..., min_length=1)


class CollectionSubmissionV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: int = Field(alias="customerId")
    amount: float = Field(..., gt=0)
    payment_type: CollectionPaymentTypeV1 = Field(alias="paymentType")
    check_number: str | None = Field(None, alias="checkNumber")
    notes: str | None = None


class StorefrontOrderItemV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="productId")
    product_name: str = Field(alias="productName")
    unit_type: str = Field(alias="unitType")
    quantity: int = Field(..., ge=1)
    unit_price: float = Field(alias="unitPrice")
    currency: str = "USD"


class StorefrontOrderV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_name: str = Field(alias="customerName")
    customer_phone: str = Field(alias="customerPhone")
    customer_address: str | None = Field(None, alias="customerAddress")
    delivery_type: DeliveryTypeV1 = Field(alias="deliveryType")
    delivery_address: str | None = Field(None, alias="deliveryAddress")
    notes: str | None = None
    items: list[StorefrontOrderItemV1] = Field(..., min_length=1)
