from __future__ import annotations

from pydantic import BaseModel

from services.api.app.pos.payment import CollectionMethod


class CollectionRequest(BaseModel):
    customer_id: int
    amount_cents: int
    method: CollectionMethod = CollectionMethod.CASH
    check_number: str | None = None
    notes: str | None = None
    # Optional: ties the collection to a driver session in the activity log.
    session_id: str | None = None
    driver_id: str | None = None


class CollectionResponse(BaseModel):
    status: str
    collection_id: str
    receipt_number: str | None = None
    customer_id: int
    amount_cents: int
    method: CollectionMethod
    previous_balance_cents: int
    remaining_balance_cents: int


class QuickAmountsResponse(BaseModel):
    customer_id: int
    current_balance_cents: int
    amounts_cents: list[int]
