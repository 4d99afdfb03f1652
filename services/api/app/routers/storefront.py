from __future__ import annotations

import logging
import os

from fastapi import APIRouter, Depends, HTTPException
from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from services.api.app.db.deps import get_db
from services.api.app.models.storefront import (
    StorefrontAddRequest,
    StorefrontCartOut,
    StorefrontCheckoutRequest,
    StorefrontLineOut,
    StorefrontOrderResponse,
    StorefrontPartitionOut,
    StorefrontQuantityRequest,
)
from services.api.app.pos.catalog import CatalogSnapshot, UnitType
from services.api.app.pos.errors import PosError
from services.api.app.pos.pricing import resolve_price
from services.api.app.pos.storefront import (
    DEFAULT_DELIVERY_FEE_CENTS,
    StorefrontCheckout,
    build_storefront_order,
)
from services.api.app.routers.common import (
    backend,
    log_event,
    raise_backend_http_error,
    raise_pos_http_error,
)
from services.api.app.services.store import StorefrontSession, store
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

router = APIRouter()


def _delivery_fee_cents() -> int:
    raw = os.getenv("FIELDPOS_DELIVERY_FEE_CENTS", "").strip()
    if not raw:
        return DEFAULT_DELIVERY_FEE_CENTS
    try:
        return max(0, int(raw))
    except ValueError as e:
        raise HTTPException(
            status_code=500, detail=f"Invalid FIELDPOS_DELIVERY_FEE_CENTS={raw!r}"
        ) from e


def _get_cart(cart_id: str) -> StorefrontSession:
    session = store.get_storefront_cart(cart_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Cart not found")
    return session


def _store_catalog(session: StorefrontSession, store_id: int) -> CatalogSnapshot:
    catalog = session.catalogs.get(store_id)
    if catalog is not None:
        return catalog

    try:
        rows = backend().load_store_catalog(store_id)
    except Exception as e:
        raise_backend_http_error(e)

    catalog = CatalogSnapshot.from_wire(rows).for_store(store_id)
    session.catalogs[store_id] = catalog
    return catalog


def _cart_out(session: StorefrontSession) -> StorefrontCartOut:
    stores = []
    for partition in session.cart:
        stores.append(
            StorefrontPartitionOut(
                store_id=partition.store_id,
                lines=[
                    StorefrontLineOut(
                        product_id=line.product.product_id,
                        name=line.product.name,
                        unit_type=line.unit_type,
                        quantity=line.quantity,
                        unit_price_cents=line.unit_price_cents,
                        line_total_cents=line.total_cents,
                        currency=line.product.currency,
                    )
                    for line in partition
                ],
                item_count=partition.item_count,
                total_cents=partition.total_cents,
            )
        )

    return StorefrontCartOut(
        cart_id=session.cart_id,
        item_count=session.cart.item_count,
        stores=stores,
    )


@router.post("/v1/storefront/carts", response_model=StorefrontCartOut)
def open_cart() -> StorefrontCartOut:
    return _cart_out(store.open_storefront_cart())


@router.get("/v1/storefront/carts/{cart_id}", response_model=StorefrontCartOut)
def get_cart(cart_id: str) -> StorefrontCartOut:
    return _cart_out(_get_cart(cart_id))


@router.post("/v1/storefront/carts/{cart_id}/items", response_model=StorefrontCartOut)
def add_item(cart_id: str, payload: StorefrontAddRequest) -> StorefrontCartOut:
    session = _get_cart(cart_id)
    with session.lock:
        catalog = _store_catalog(session, payload.store_id)

        try:
            product = catalog.get(payload.product_id)
            price = resolve_price(product, payload.unit_type)
            session.cart.add_line(product, payload.unit_type, price)
        except PosError as e:
            raise_pos_http_error(e)

        return _cart_out(session)


@router.patch(
    "/v1/storefront/carts/{cart_id}/items/{store_id}/{product_id}/{unit_type}",
    response_model=StorefrontCartOut,
)
def update_item(
    cart_id: str,
    store_id: int,
    product_id: int,
    unit_type: UnitType,
    payload: StorefrontQuantityRequest,
) -> StorefrontCartOut:
    session = _get_cart(cart_id)
    with session.lock:
        try:
            session.cart.update_quantity(store_id, product_id, unit_type, payload.delta)
        except PosError as e:
            raise_pos_http_error(e)

        return _cart_out(session)


@router.delete(
    "/v1/storefront/carts/{cart_id}/items/{store_id}/{product_id}/{unit_type}",
    response_model=StorefrontCartOut,
)
def remove_item(
    cart_id: str,
    store_id: int,
    product_id: int,
    unit_type: UnitType,
) -> StorefrontCartOut:
    session = _get_cart(cart_id)
    with session.lock:
        session.cart.remove_line(store_id, product_id, unit_type)
        return _cart_out(session)


@router.post(
    "/v1/storefront/carts/{cart_id}/checkout/{store_id}",
    response_model=StorefrontOrderResponse,
)
def checkout(
    cart_id: str,
    store_id: int,
    payload: StorefrontCheckoutRequest,
    db: Session = Depends(get_db),
) -> StorefrontOrderResponse:
    session = _get_cart(cart_id)
    details = StorefrontCheckout(
        name=payload.name,
        phone=payload.phone,
        delivery_type=payload.delivery_type,
        address=payload.address,
        notes=payload.notes,
    )

    with session.lock:
        try:
            draft = build_storefront_order(session.cart, store_id, details, _delivery_fee_cents())
        except PosError as e:
            raise_pos_http_error(e)

        adapter = backend()
        try:
            accepted = adapter.submit_storefront_order(store_id, draft.to_submission())
        except Exception as e:
            logger.warning("storefront order failed for store %s: %s", store_id, e)
            log_event(
                db,
                session_id=session.cart_id,
                actor_id=None,
                entity_type=EntityTypeV1.STOREFRONT_ORDER.value,
                entity_id=str(store_id),
                event_type=EventTypeV1.STOREFRONT_ORDER_FAILED.value,
                event_payload={"total_cents": draft.total_cents, "error": str(e)},
            )
            db.commit()
            raise_backend_http_error(e)

        session.cart.clear_store(store_id)

    log_event(
        db,
        session_id=session.cart_id,
        actor_id=None,
        entity_type=EntityTypeV1.STOREFRONT_ORDER.value,
        entity_id=accepted.order_id or accepted.order_number,
        event_type=EventTypeV1.STOREFRONT_ORDER_SUBMITTED.value,
        event_payload={
            "order_number": accepted.order_number,
            "store_id": store_id,
            "delivery_type": details.delivery_type.value,
            "subtotal_cents": draft.subtotal_cents,
            "delivery_fee_cents": draft.delivery_fee_cents,
            "total_cents": draft.total_cents,
        },
    )
    db.commit()

    return StorefrontOrderResponse(
        status="accepted",
        order_number=accepted.order_number,
        store_id=store_id,
        subtotal_cents=draft.subtotal_cents,
        delivery_fee_cents=draft.delivery_fee_cents,
        total_cents=draft.total_cents,
    )
