"""Consumer storefront: a multi-vendor cart checked out one store at a time.

Each store's items live in their own ``Cart`` partition, so checking out (or clearing)
one store never touches another store's lines.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from packages.shared.schemas.order_v1 import (
    DeliveryTypeV1,
    StorefrontOrderItemV1,
    StorefrontOrderV1,
)
from services.api.app.pos.cart import Cart, CartLine
from services.api.app.pos.catalog import Product, UnitType
from services.api.app.pos.errors import (
    EmptyCartError,
    LineNotFoundError,
    MissingContactInfoError,
    MissingDeliveryAddressError,
)
from services.api.app.pos.money import to_major
from services.api.app.pos.pricing import PriceResolution

DEFAULT_DELIVERY_FEE_CENTS = 200


class StorefrontCart:
    def __init__(self) -> None:
        self._partitions: dict[int, Cart] = {}

    def __iter__(self) -> Iterator[Cart]:
        return iter(list(self._partitions.values()))

    @property
    def store_ids(self) -> list[int]:
        return list(self._partitions)

    def partition(self, store_id: int) -> Cart:
        """The store's cart; an empty one when nothing has been added for it."""

        return self._partitions.get(store_id) or Cart(store_id=store_id)

    def add_line(self, product: Product, unit_type: UnitType, price: PriceResolution) -> CartLine:
        if product.store_id is None:
            raise ValueError(f"Product {product.product_id} has no store_id")

        cart = self._partitions.get(product.store_id)
        if cart is None:
            cart = Cart(store_id=product.store_id)

        line = cart.add_line(product, unit_type, price)
        self._partitions[product.store_id] = cart
        return line

    def update_quantity(
        self, store_id: int, product_id: int, unit_type: UnitType, delta: int
    ) -> CartLine | None:
        cart = self._partitions.get(store_id)
        if cart is None:
            raise LineNotFoundError(product_id, UnitType(unit_type).value)

        line = cart.update_quantity(product_id, unit_type, delta)
        self._drop_if_empty(store_id)
        return line

    def remove_line(self, store_id: int, product_id: int, unit_type: UnitType) -> None:
        cart = self._partitions.get(store_id)
        if cart is None:
            return
        cart.remove_line(product_id, unit_type)
        self._drop_if_empty(store_id)

    def clear_store(self, store_id: int) -> None:
        self._partitions.pop(store_id, None)

    def clear(self) -> None:
        self._partitions.clear()

    @property
    def item_count(self) -> int:
        return sum(cart.item_count for cart in self._partitions.values())

    def _drop_if_empty(self, store_id: int) -> None:
        cart = self._partitions.get(store_id)
        if cart is not None and cart.is_empty:
            del self._partitions[store_id]


@dataclass(frozen=True, slots=True)
class StorefrontCheckout:
    name: str
    phone: str
    delivery_type: DeliveryTypeV1 = DeliveryTypeV1.DELIVERY
    address: str | None = None
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class StorefrontOrderLine:
    product_id: int
    name: str
    unit_type: UnitType
    quantity: int
    unit_price_cents: int
    currency: str

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


@dataclass(frozen=True, slots=True)
class StorefrontOrderDraft:
    store_id: int
    lines: tuple[StorefrontOrderLine, ...]
    subtotal_cents: int
    delivery_fee_cents: int
    checkout: StorefrontCheckout

    @property
    def total_cents(self) -> int:
        return self.subtotal_cents + self.delivery_fee_cents

    def to_submission(self) -> StorefrontOrderV1:
        checkout = self.checkout
        is_delivery = checkout.delivery_type == DeliveryTypeV1.DELIVERY
        address = (checkout.address or "").strip() or None

        return StorefrontOrderV1(
            customer_name=checkout.name.strip(),
            customer_phone=checkout.phone.strip(),
            customer_address=address,
            delivery_type=checkout.delivery_type,
            delivery_address=address if is_delivery else None,
            notes=(checkout.notes or "").strip() or None,
            items=[
                StorefrontOrderItemV1(
                    product_id=line.product_id,
                    product_name=line.name,
                    unit_type=line.unit_type.value,
                    quantity=line.quantity,
                    unit_price=to_major(line.unit_price_cents),
                    currency=line.currency,
                )
                for line in self.lines
            ],
        )


def build_storefront_order(
    cart: StorefrontCart,
    store_id: int,
    checkout: StorefrontCheckout,
    delivery_fee_cents: int = DEFAULT_DELIVERY_FEE_CENTS,
) -> StorefrontOrderDraft:
    partition = cart.partition(store_id)
    if partition.is_empty:
        raise EmptyCartError()

    if not checkout.name.strip() or not checkout.phone.strip():
        raise MissingContactInfoError()

    is_delivery = checkout.delivery_type == DeliveryTypeV1.DELIVERY
    if is_delivery and not (checkout.address or "").strip():
        raise MissingDeliveryAddressError()

    lines = tuple(
        StorefrontOrderLine(
            product_id=line.product.product_id,
            name=line.product.name,
            unit_type=line.unit_type,
            quantity=line.quantity,
            unit_price_cents=line.unit_price_cents - line.discount_cents,
            currency=line.product.currency,
        )
        for line in partition
    )

    return StorefrontOrderDraft(
        store_id=store_id,
        lines=lines,
        subtotal_cents=partition.total_cents,
        delivery_fee_cents=delivery_fee_cents if is_delivery else 0,
        checkout=checkout,
    )
