from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from packages.shared.schemas.catalog_v1 import CustomerPriceOverrideV1, CustomerV1, ProductV1
from packages.shared.schemas.order_v1 import (
    CollectionSubmissionV1,
    OrderSubmissionV1,
    StorefrontOrderV1,
)


class BackendAdapterError(Exception):
    """Base class for backend adapter errors."""


class BackendConfigError(BackendAdapterError):
    pass


class BackendUnavailableError(BackendAdapterError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Backend unreachable at {url}: {reason}")
        self.url = url
        self.reason = reason


class BackendRejectedError(BackendAdapterError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Backend rejected the request ({status_code}): {message}")
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True, slots=True)
class OrderAccepted:
    order_number: str
    order_id: str | None = None


@dataclass(frozen=True, slots=True)
class CollectionAccepted:
    collection_id: str
    receipt_number: str | None = None


class BackendAdapter(Protocol):
    name: str

    def load_catalog(self) -> list[ProductV1]: ...

    def load_customers(self) -> list[CustomerV1]: ...

    def load_customer_prices(self, customer_id: int) -> list[CustomerPriceOverrideV1]: ...

    def load_store_catalog(self, store_id: int) -> list[ProductV1]: ...

    def submit_order(self, payload: OrderSubmissionV1) -> OrderAccepted: ...

    def submit_collection(self, payload: CollectionSubmissionV1) -> CollectionAccepted: ...

    def submit_storefront_order(
        self, store_id: int, payload: StorefrontOrderV1
    ) -> OrderAccepted: ...
