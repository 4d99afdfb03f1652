from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from services.api.app.db.deps import get_db
from services.api.app.models.order import (
    DraftLineOut,
    OrderDraftRequest,
    OrderDraftResponse,
    OrderSubmitResponse,
)
from services.api.app.pos.draft import OrderDraft, OrderMetadata, build_order_draft, build_receipt
from services.api.app.pos.errors import PosError
from services.api.app.routers.common import (
    backend,
    get_sale_session,
    log_event,
    raise_backend_http_error,
    raise_pos_http_error,
)
from services.api.app.services.store import SaleSession
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

router = APIRouter()


def _build(session: SaleSession, payload: OrderDraftRequest) -> OrderDraft:
    metadata = OrderMetadata(
        notes=payload.notes,
        delivery_type=payload.delivery_type,
        address=payload.address,
    )
    try:
        return build_order_draft(session.cart, session.allocator, metadata, session.customer)
    except PosError as e:
        raise_pos_http_error(e)


@router.post("/v1/sessions/{session_id}/draft", response_model=OrderDraftResponse)
def preview_order(session_id: str, payload: OrderDraftRequest) -> OrderDraftResponse:
    session = get_sale_session(session_id)
    with session.lock:
        draft = _build(session, payload)

    return OrderDraftResponse(
        session_id=session.session_id,
        customer_id=draft.customer_id,
        lines=[
            DraftLineOut(
                product_id=line.product_id,
                name=line.name,
                unit_type=line.unit_type,
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
        payment_type=draft.payment.method,
        cash_amount_cents=draft.payment.cash_amount_cents,
        credit_amount_cents=draft.payment.credit_amount_cents,
        notes=draft.metadata.notes,
        submission=draft.to_submission().model_dump(by_alias=True, mode="json"),
    )


@router.post("/v1/sessions/{session_id}/submit", response_model=OrderSubmitResponse)
def submit_order(
    session_id: str,
    payload: OrderDraftRequest,
    db: Session = Depends(get_db),
) -> OrderSubmitResponse:
    session = get_sale_session(session_id)

    # A second submit waits here and then finds the cart already reset.
    with session.lock:
        draft = _build(session, payload)
        adapter = backend()

        try:
            accepted = adapter.submit_order(draft.to_submission())
        except Exception as e:
            logger.warning("order submit failed for session %s: %s", session.session_id, e)
            log_event(
                db,
                session_id=session.session_id,
                actor_id=session.driver_id,
                entity_type=EntityTypeV1.ORDER.value,
                entity_id=session.session_id,
                event_type=EventTypeV1.ORDER_FAILED.value,
                event_payload={"total_cents": draft.total_cents, "error": str(e)},
            )
            db.commit()
            raise_backend_http_error(e)

        # The customer snapshot is from before this order; the receipt projects the new balance.
        receipt = build_receipt(draft, accepted.order_number, session.customer)
        session.reset_after_submit()

    logger.info(
        "order %s accepted for session %s (total=%s)",
        accepted.order_number,
        session.session_id,
        draft.total_cents,
    )
    log_event(
        db,
        session_id=session.session_id,
        actor_id=session.driver_id,
        entity_type=EntityTypeV1.ORDER.value,
        entity_id=accepted.order_id or accepted.order_number,
        event_type=EventTypeV1.ORDER_SUBMITTED.value,
        event_payload={
            "order_number": accepted.order_number,
            "customer_id": draft.customer_id,
            "payment_type": draft.payment.method.value,
            "total_cents": draft.total_cents,
            "cash_amount_cents": draft.payment.cash_amount_cents,
            "credit_amount_cents": draft.payment.credit_amount_cents,
            "item_count": draft.item_count,
        },
    )
    db.commit()

    return OrderSubmitResponse(
        status="accepted",
        order_number=accepted.order_number,
        receipt=receipt,
    )
