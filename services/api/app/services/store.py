from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from uuid import uuid4

from services.api.app.pos.cart import Cart
from services.api.app.pos.catalog import CatalogSnapshot
from services.api.app.pos.customers import Customer
from services.api.app.pos.payment import PaymentAllocator
from services.api.app.pos.pricing import PriceOverrides
from services.api.app.pos.storefront import StorefrontCart


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "y"}


@dataclass
class SaleSession:
    """One driver's active sale. Every operation takes this handle explicitly."""

    session_id: str
    driver_id: str
    catalog: CatalogSnapshot
    cart: Cart = field(default_factory=Cart)
    allocator: PaymentAllocator = field(default_factory=PaymentAllocator)
    customer: Customer | None = None
    overrides: PriceOverrides = field(default_factory=PriceOverrides)
    # Handlers run in a threadpool; hold this for any read-modify-write of the sale.
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def attach_customer(self, customer: Customer, overrides: PriceOverrides) -> None:
        self.customer = customer
        self.overrides = overrides

    def detach_customer(self) -> None:
        self.customer = None
        self.overrides = PriceOverrides()

    def reset_after_submit(self) -> None:
        self.cart.clear()
        self.allocator.reset()


@dataclass
class StorefrontSession:
    cart_id: str
    catalogs: dict[int, CatalogSnapshot] = field(default_factory=dict)
    cart: StorefrontCart = field(default_factory=StorefrontCart)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class InMemoryStore:
    def __init__(self) -> None:
        self._sessions: dict[str, SaleSession] = {}
        self._storefront: dict[str, StorefrontSession] = {}

    def open_session(self, driver_id: str, catalog: CatalogSnapshot) -> SaleSession:
        session = SaleSession(
            session_id=uuid4().hex,
            driver_id=driver_id,
            catalog=catalog,
            allocator=PaymentAllocator(
                enforce_credit_limit=_env_flag("FIELDPOS_ENFORCE_CREDIT_LIMIT")
            ),
        )
        self._sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> SaleSession | None:
        return self._sessions.get(session_id)

    def close_session(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def open_storefront_cart(self) -> StorefrontSession:
        session = StorefrontSession(cart_id=uuid4().hex)
        self._storefront[session.cart_id] = session
        return session

    def get_storefront_cart(self, cart_id: str) -> StorefrontSession | None:
        return self._storefront.get(cart_id)


store = InMemoryStore()
