from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

from packages.shared.schemas.catalog_v1 import CustomerPriceOverrideV1, CustomerV1, ProductV1
from packages.shared.schemas.order_v1 import (
    CollectionSubmissionV1,
    OrderSubmissionV1,
    StorefrontOrderV1,
)
from services.api.app.services.backend_base import (
    BackendAdapter,
    BackendRejectedError,
    CollectionAccepted,
    OrderAccepted,
)


def _default_catalog() -> list[ProductV1]:
    return [
        ProductV1(
            product_id=1,
            sku="WAT-500",
            name="Water 500ml",
            base_unit="bottle",
            second_unit="pack",
            units_per_second_unit=5,
            stock_in_base_units=10,
            base_unit_price=Decimal("2.00"),
            second_unit_price=Decimal("9.00"),
            barcode="6001000000011",
            second_unit_barcode="6001000000028",
        ),
        ProductV1(
            product_id=2,
            sku="JUI-1L",
            name="Orange Juice 1L",
            base_unit="carton",
            second_unit="box",
            units_per_second_unit=12,
            stock_in_base_units=30,
            base_unit_price=Decimal("3.50"),
            second_unit_price=Decimal("39.00"),
            barcode="6001000000035",
            second_unit_barcode="6001000000042",
        ),
        ProductV1(
            product_id=3,
            sku="CHP-50",
            name="Chips 50g",
            base_unit="bag",
            stock_in_base_units=40,
            base_unit_price=Decimal("1.25"),
            barcode="6001000000059",
        ),
        ProductV1(
            product_id=4,
            sku="SOAP-01",
            name="Hand Soap",
            base_unit="piece",
            stock_in_base_units=0,
            base_unit_price=Decimal("4.00"),
        ),
    ]


def _default_customers() -> list[CustomerV1]:
    return [
        CustomerV1(
            id=101,
            name="Corner Market",
            phone="555-0101",
            current_balance=Decimal("120.00"),
            credit_limit=Decimal("500.00"),
        ),
        CustomerV1(
            id=102,
            name="Sunrise Grocery",
            phone="555-0102",
            current_balance=Decimal("0"),
            credit_limit=Decimal("0"),
        ),
    ]


def _default_prices() -> dict[int, list[CustomerPriceOverrideV1]]:
    return {
        101: [
            CustomerPriceOverrideV1(
                product_id=1,
                base_unit_override=Decimal("1.50"),
                has_base_unit_override=True,
            ),
        ],
    }


def _default_store_catalogs() -> dict[int, list[ProductV1]]:
    return {
        7: [
            ProductV1(
                product_id=701,
                sku="BRD-01",
                name="Sourdough Bread",
                base_unit="loaf",
                stock_in_base_units=20,
                base_unit_price=Decimal("4.50"),
                store_id=7,
            ),
        ],
        8: [
            ProductV1(
                product_id=801,
                sku="EGG-12",
                name="Eggs",
                base_unit="egg",
                second_unit="dozen",
                units_per_second_unit=12,
                stock_in_base_units=60,
                base_unit_price=Decimal("0.40"),
                second_unit_price=Decimal("4.20"),
                store_id=8,
            ),
        ],
    }


class MockBackendAdapter(BackendAdapter):
    """Deterministic in-process backend. Records every accepted submission."""

    name = "MOCK_BACKEND"

    def __init__(self) -> None:
        self._catalog = _default_catalog()
        self._customers = _default_customers()
        self._prices = _default_prices()
        self._store_catalogs = _default_store_catalogs()

        self.orders: list[OrderSubmissionV1] = []
        self.collections: list[CollectionSubmissionV1] = []
        self.storefront_orders: list[tuple[int, StorefrontOrderV1]] = []

    def load_catalog(self) -> list[ProductV1]:
        return [p.model_copy() for p in self._catalog]

    def load_customers(self) -> list[CustomerV1]:
        return [c.model_copy() for c in self._customers]

    def load_customer_prices(self, customer_id: int) -> list[CustomerPriceOverrideV1]:
        return [o.model_copy() for o in self._prices.get(customer_id, [])]

    def load_store_catalog(self, store_id: int) -> list[ProductV1]:
        return [p.model_copy() for p in self._store_catalogs.get(store_id, [])]

    def submit_order(self, payload: OrderSubmissionV1) -> OrderAccepted:
        if payload.customer_id is not None and payload.customer_id not in self._customer_ids():
            raise BackendRejectedError(404, f"Unknown customer {payload.customer_id}")

        self.orders.append(payload)
        return OrderAccepted(
            order_number=f"ORD-{len(self.orders):05d}",
            order_id=uuid4().hex,
        )

    def submit_collection(self, payload: CollectionSubmissionV1) -> CollectionAccepted:
        if payload.customer_id not in self._customer_ids():
            raise BackendRejectedError(404, f"Unknown customer {payload.customer_id}")

        self.collections.append(payload)
        return CollectionAccepted(
            collection_id=uuid4().hex,
            receipt_number=f"COL-{len(self.collections):05d}",
        )

    def submit_storefront_order(self, store_id: int, payload: StorefrontOrderV1) -> OrderAccepted:
        if store_id not in self._store_catalogs:
            raise BackendRejectedError(404, f"Unknown store {store_id}")

        self.storefront_orders.append((store_id, payload))
        return OrderAccepted(
            order_number=f"WEB-{store_id}-{len(self.storefront_orders):05d}",
            order_id=uuid4().hex,
        )

    def _customer_ids(self) -> set[int]:
        return {c.id for c in self._customers}
