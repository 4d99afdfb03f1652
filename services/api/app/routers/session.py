from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from services.api.app.db.deps import get_db
from services.api.app.models.session import (
    AddLineRequest,
    AttachCustomerRequest,
    CartLineOut,
    CatalogItemOut,
    CustomerOut,
    DiscountRequest,
    PaymentOut,
    PaymentSelectRequest,
    ScanRequest,
    SessionOpenRequest,
    SessionOut,
    UnitAvailabilityOut,
    UpdateQuantityRequest,
)
from services.api.app.pos.catalog import CatalogSnapshot, Product, UnitType
from services.api.app.pos.customers import Customer
from services.api.app.pos.errors import InvalidSplitAmountError, PosError
from services.api.app.pos.payment import PaymentMethod
from services.api.app.pos.pricing import PriceOverrides, resolve_price
from services.api.app.routers.common import (
    backend,
    get_sale_session,
    log_event,
    raise_backend_http_error,
    raise_pos_http_error,
)
from services.api.app.services.store import SaleSession, store
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/v1/sessions", response_model=SessionOut)
def open_session(payload: SessionOpenRequest, db: Session = Depends(get_db)) -> SessionOut:
    adapter = backend()
    try:
        rows = adapter.load_catalog()
    except Exception as e:
        raise_backend_http_error(e)

    session = store.open_session(payload.driver_id, CatalogSnapshot.from_wire(rows))
    logger.info(
        "opened session %s for driver %s with %d products",
        session.session_id,
        payload.driver_id,
        len(session.catalog),
    )

    log_event(
        db,
        session_id=session.session_id,
        actor_id=payload.driver_id,
        entity_type=EntityTypeV1.SESSION.value,
        entity_id=session.session_id,
        event_type=EventTypeV1.SESSION_OPENED.value,
        event_payload={"products": len(session.catalog), "backend": adapter.name},
    )
    db.commit()

    return _session_out(session)


@router.get("/v1/sessions/{session_id}", response_model=SessionOut)
def get_session(session_id: str) -> SessionOut:
    return _session_out(get_sale_session(session_id))


@router.delete("/v1/sessions/{session_id}", status_code=204)
def close_session(session_id: str) -> None:
    get_sale_session(session_id)
    store.close_session(session_id)


@router.get("/v1/sessions/{session_id}/catalog", response_model=list[CatalogItemOut])
def list_catalog(session_id: str, search: str | None = None) -> list[CatalogItemOut]:
    session = get_sale_session(session_id)
    return [_catalog_item_out(session, p) for p in session.catalog.search(search)]


@router.get("/v1/sessions/{session_id}/catalog/quick", response_model=list[CatalogItemOut])
def quick_picks(session_id: str, limit: int = Query(6, ge=1, le=50)) -> list[CatalogItemOut]:
    session = get_sale_session(session_id)
    return [_catalog_item_out(session, p) for p in session.catalog.quick_products(limit)]


@router.post("/v1/sessions/{session_id}/customer", response_model=SessionOut)
def attach_customer(
    session_id: str,
    payload: AttachCustomerRequest,
    db: Session = Depends(get_db),
) -> SessionOut:
    session = get_sale_session(session_id)
    adapter = backend()

    try:
        customers = [Customer.from_wire(c) for c in adapter.load_customers()]
    except Exception as e:
        raise_backend_http_error(e)

    customer = next((c for c in customers if c.customer_id == payload.customer_id), None)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")

    try:
        overrides = PriceOverrides.from_wire(adapter.load_customer_prices(customer.customer_id))
    except Exception as e:
        # Fall back to catalog prices.
        logger.warning("could not load prices for customer %s: %s", customer.customer_id, e)
        overrides = PriceOverrides()

    with session.lock:
        session.attach_customer(customer, overrides)

    log_event(
        db,
        session_id=session.session_id,
        actor_id=session.driver_id,
        entity_type=EntityTypeV1.SESSION.value,
        entity_id=session.session_id,
        event_type=EventTypeV1.CUSTOMER_ATTACHED.value,
        event_payload={"customer_id": customer.customer_id, "overrides": len(overrides)},
    )
    db.commit()

    return _session_out(session)


@router.delete("/v1/sessions/{session_id}/customer", response_model=SessionOut)
def detach_customer(session_id: str, db: Session = Depends(get_db)) -> SessionOut:
    session = get_sale_session(session_id)
    with session.lock:
        previous = session.customer
        session.detach_customer()

    if previous is not None:
        log_event(
            db,
            session_id=session.session_id,
            actor_id=session.driver_id,
            entity_type=EntityTypeV1.SESSION.value,
            entity_id=session.session_id,
            event_type=EventTypeV1.CUSTOMER_DETACHED.value,
            event_payload={"customer_id": previous.customer_id},
        )
        db.commit()

    return _session_out(session)


@router.post("/v1/sessions/{session_id}/lines", response_model=SessionOut)
def add_line(session_id: str, payload: AddLineRequest) -> SessionOut:
    session = get_sale_session(session_id)
    with session.lock:
        try:
            product = session.catalog.get(payload.product_id)
            _add(session, product, payload.unit_type)
        except PosError as e:
            raise_pos_http_error(e)

        return _session_out(session)


@router.post("/v1/sessions/{session_id}/scan", response_model=SessionOut)
def scan_code(session_id: str, payload: ScanRequest) -> SessionOut:
    session = get_sale_session(session_id)
    with session.lock:
        try:
            product, unit_type = session.catalog.lookup_code(payload.code)
            _add(session, product, unit_type)
        except PosError as e:
            raise_pos_http_error(e)

        return _session_out(session)


@router.patch("/v1/sessions/{session_id}/lines/{product_id}/{unit_type}", response_model=SessionOut)
def update_quantity(
    session_id: str,
    product_id: int,
    unit_type: UnitType,
    payload: UpdateQuantityRequest,
) -> SessionOut:
    session = get_sale_session(session_id)
    with session.lock:
        try:
            session.cart.update_quantity(product_id, unit_type, payload.delta)
        except PosError as e:
            raise_pos_http_error(e)

        return _session_out(session)


@router.put(
    "/v1/sessions/{session_id}/lines/{product_id}/{unit_type}/discount",
    response_model=SessionOut,
)
def apply_discount(
    session_id: str,
    product_id: int,
    unit_type: UnitType,
    payload: DiscountRequest,
) -> SessionOut:
    session = get_sale_session(session_id)
    with session.lock:
        try:
            session.cart.apply_discount(product_id, unit_type, payload.per_unit_discount_cents)
        except PosError as e:
            raise_pos_http_error(e)

        return _session_out(session)


@router.delete(
    "/v1/sessions/{session_id}/lines/{product_id}/{unit_type}",
    response_model=SessionOut,
)
def remove_line(session_id: str, product_id: int, unit_type: UnitType) -> SessionOut:
    session = get_sale_session(session_id)
    with session.lock:
        session.cart.remove_line(product_id, unit_type)
        return _session_out(session)


@router.delete("/v1/sessions/{session_id}/lines", response_model=SessionOut)
def clear_cart(session_id: str, db: Session = Depends(get_db)) -> SessionOut:
    session = get_sale_session(session_id)
    with session.lock:
        if session.cart.is_empty:
            return _session_out(session)

        dropped = session.cart.item_count
        session.cart.clear()

    log_event(
        db,
        session_id=session.session_id,
        actor_id=session.driver_id,
        entity_type=EntityTypeV1.SESSION.value,
        entity_id=session.session_id,
        event_type=EventTypeV1.CART_CLEARED.value,
        event_payload={"items": dropped},
    )
    db.commit()

    return _session_out(session)


@router.put("/v1/sessions/{session_id}/payment", response_model=SessionOut)
def select_payment(session_id: str, payload: PaymentSelectRequest) -> SessionOut:
    session = get_sale_session(session_id)

    with session.lock:
        session.allocator.select(payload.method, session.cart.total_cents)
        if payload.method == PaymentMethod.SPLIT and payload.cash_amount_cents is not None:
            session.allocator.set_cash_amount(payload.cash_amount_cents)

        return _session_out(session)


def _add(session: SaleSession, product: Product, unit_type: UnitType) -> None:
    price = resolve_price(product, unit_type, session.overrides)
    session.cart.add_line(product, unit_type, price)


def _session_out(session: SaleSession) -> SessionOut:
    cart = session.cart
    customer = session.customer

    # A split entry that is not valid yet shows the entered cash and the rest on credit.
    allocator = session.allocator
    try:
        allocation = allocator.validate(cart.total_cents)
        payment = PaymentOut(
            method=allocation.method,
            cash_amount_cents=allocation.cash_amount_cents,
            credit_amount_cents=allocation.credit_amount_cents,
        )
    except InvalidSplitAmountError:
        payment = PaymentOut(
            method=allocator.method,
            cash_amount_cents=allocator.cash_amount_cents,
            credit_amount_cents=max(0, cart.total_cents - allocator.cash_amount_cents),
        )

    return SessionOut(
        session_id=session.session_id,
        driver_id=session.driver_id,
        customer=(
            CustomerOut(
                customer_id=customer.customer_id,
                name=customer.name,
                phone=customer.phone,
                current_balance_cents=customer.current_balance_cents,
                credit_limit_cents=customer.credit_limit_cents,
            )
            if customer is not None
            else None
        ),
        lines=[
            CartLineOut(
                product_id=line.product.product_id,
                name=line.product.name,
                sku=line.product.sku,
                unit_type=line.unit_type,
                unit_label=line.product.unit_label(line.unit_type),
                quantity=line.quantity,
                unit_price_cents=line.unit_price_cents,
                discount_cents=line.discount_cents,
                line_total_cents=line.total_cents,
                is_overridden=line.is_overridden,
                max_quantity=cart.max_quantity(line.product, line.unit_type),
            )
            for line in cart
        ],
        item_count=cart.item_count,
        subtotal_cents=cart.subtotal_cents,
        discount_cents=cart.total_discount_cents,
        total_cents=cart.total_cents,
        payment=payment,
    )


def _catalog_item_out(session: SaleSession, product: Product) -> CatalogItemOut:
    unit_types = [UnitType.BASE]
    if product.has_second_unit:
        unit_types.append(UnitType.SECOND)

    units = []
    for unit_type in unit_types:
        price = resolve_price(product, unit_type, session.overrides)
        units.append(
            UnitAvailabilityOut(
                unit_type=unit_type,
                unit_label=product.unit_label(unit_type),
                price_cents=price.price_cents,
                is_overridden=price.is_overridden,
                remaining=session.cart.remaining(product, unit_type),
            )
        )

    return CatalogItemOut(
        product_id=product.product_id,
        sku=product.sku,
        name=product.name,
        image_url=product.image_url,
        stock_in_base_units=product.stock_in_base_units,
        units=units,
    )
