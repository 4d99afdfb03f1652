from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from services.api.app.db.deps import get_db
from services.api.app.models.collection import (
    CollectionRequest,
    CollectionResponse,
    QuickAmountsResponse,
)
from services.api.app.models.session import CustomerOut
from services.api.app.pos.customers import Customer, customers_with_debt, search_customers
from services.api.app.pos.errors import PosError
from services.api.app.pos.payment import quick_collection_amounts, validate_collection
from services.api.app.routers.common import (
    backend,
    log_event,
    raise_backend_http_error,
    raise_pos_http_error,
)
from services.api.app.services.backend_base import BackendAdapter
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_customers(adapter: BackendAdapter) -> list[Customer]:
    try:
        return [Customer.from_wire(c) for c in adapter.load_customers()]
    except Exception as e:
        raise_backend_http_error(e)


def _find_customer(adapter: BackendAdapter, customer_id: int) -> Customer:
    for customer in _load_customers(adapter):
        if customer.customer_id == customer_id:
            return customer
    raise HTTPException(status_code=404, detail="Customer not found")


@router.get("/v1/customers", response_model=list[CustomerOut])
def list_customers(search: str | None = None, with_debt: bool = False) -> list[CustomerOut]:
    customers = search_customers(_load_customers(backend()), search)
    if with_debt:
        customers = customers_with_debt(customers)

    return [
        CustomerOut(
            customer_id=c.customer_id,
            name=c.name,
            phone=c.phone,
            current_balance_cents=c.current_balance_cents,
            credit_limit_cents=c.credit_limit_cents,
        )
        for c in customers
    ]


@router.get("/v1/customers/{customer_id}/collection-amounts", response_model=QuickAmountsResponse)
def collection_amounts(customer_id: int) -> QuickAmountsResponse:
    customer = _find_customer(backend(), customer_id)
    return QuickAmountsResponse(
        customer_id=customer.customer_id,
        current_balance_cents=customer.current_balance_cents,
        amounts_cents=quick_collection_amounts(customer.current_balance_cents),
    )


@router.post("/v1/collections", response_model=CollectionResponse)
def submit_collection(
    payload: CollectionRequest,
    db: Session = Depends(get_db),
) -> CollectionResponse:
    adapter = backend()
    customer = _find_customer(adapter, payload.customer_id)

    try:
        collection = validate_collection(
            customer,
            payload.amount_cents,
            payload.method,
            payload.check_number,
            payload.notes,
        )
    except PosError as e:
        raise_pos_http_error(e)

    try:
        accepted = adapter.submit_collection(collection.to_submission())
    except Exception as e:
        logger.warning("collection submit failed for customer %s: %s", customer.customer_id, e)
        log_event(
            db,
            session_id=payload.session_id,
            actor_id=payload.driver_id,
            entity_type=EntityTypeV1.COLLECTION.value,
            entity_id=str(customer.customer_id),
            event_type=EventTypeV1.COLLECTION_FAILED.value,
            event_payload={"amount_cents": collection.amount_cents, "error": str(e)},
        )
        db.commit()
        raise_backend_http_error(e)

    log_event(
        db,
        session_id=payload.session_id,
        actor_id=payload.driver_id,
        entity_type=EntityTypeV1.COLLECTION.value,
        entity_id=accepted.collection_id,
        event_type=EventTypeV1.COLLECTION_SUBMITTED.value,
        event_payload={
            "customer_id": customer.customer_id,
            "amount_cents": collection.amount_cents,
            "method": collection.method.value,
            "remaining_balance_cents": collection.remaining_balance_cents,
        },
    )
    db.commit()

    return CollectionResponse(
        status="accepted",
        collection_id=accepted.collection_id,
        receipt_number=accepted.receipt_number,
        customer_id=customer.customer_id,
        amount_cents=collection.amount_cents,
        method=collection.method,
        previous_balance_cents=collection.previous_balance_cents,
        remaining_balance_cents=collection.remaining_balance_cents,
    )
