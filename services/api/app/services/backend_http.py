from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.request
from typing import Any

from packages.shared.schemas.catalog_v1 import CustomerPriceOverrideV1, CustomerV1, ProductV1
from packages.shared.schemas.order_v1 import (
    CollectionSubmissionV1,
    OrderSubmissionV1,
    StorefrontOrderV1,
)
from pydantic import BaseModel
from services.api.app.services.backend_base import (
    BackendAdapter,
    BackendConfigError,
    BackendRejectedError,
    BackendUnavailableError,
    CollectionAccepted,
    OrderAccepted,
)

logger = logging.getLogger(__name__)


class HttpBackendAdapter(BackendAdapter):
    """Talks to the company backend's driver and store endpoints."""

    name = "HTTP_BACKEND"

    def __init__(self, base_url: str, token: str | None = None, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token = token

    @classmethod
    def from_env(cls) -> HttpBackendAdapter:
        base_url = os.getenv("FIELDPOS_BACKEND_URL", "").strip()
        if not base_url:
            raise BackendConfigError(
                "FIELDPOS_BACKEND_URL is required when FIELDPOS_BACKEND_ADAPTER=http"
            )

        raw_timeout = os.getenv("FIELDPOS_BACKEND_TIMEOUT", "10").strip()
        try:
            timeout = float(raw_timeout)
        except ValueError as e:
            raise BackendConfigError(
                f"FIELDPOS_BACKEND_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from e

        token = os.getenv("FIELDPOS_BACKEND_TOKEN", "").strip() or None
        return cls(base_url=base_url, token=token, timeout=timeout)

    def load_catalog(self) -> list[ProductV1]:
        rows = self._request("GET", "/driver/inventory")
        return [ProductV1.model_validate(r) for r in rows or []]

    def load_customers(self) -> list[CustomerV1]:
        rows = self._request("GET", "/driver/customers")
        return [CustomerV1.model_validate(r) for r in rows or []]

    def load_customer_prices(self, customer_id: int) -> list[CustomerPriceOverrideV1]:
        rows = self._request("GET", f"/driver/inventory/prices/{customer_id}")
        return [CustomerPriceOverrideV1.model_validate(r) for r in rows or []]

    def load_store_catalog(self, store_id: int) -> list[ProductV1]:
        rows = self._request("GET", f"/store/{store_id}/products")
        products = [ProductV1.model_validate(r) for r in rows or []]
        return [
            p if p.store_id is not None else p.model_copy(update={"store_id": store_id})
            for p in products
        ]

    def submit_order(self, payload: OrderSubmissionV1) -> OrderAccepted:
        data = self._request("POST", "/driver/orders", body=_dump(payload)) or {}
        order_id = data.get("id")
        return OrderAccepted(
            order_number=str(data.get("orderNumber") or order_id or ""),
            order_id=str(order_id) if order_id is not None else None,
        )

    def submit_collection(self, payload: CollectionSubmissionV1) -> CollectionAccepted:
        data = self._request("POST", "/driver/collections", body=_dump(payload)) or {}
        return CollectionAccepted(
            collection_id=str(data.get("id") or ""),
            receipt_number=data.get("receiptNumber") or data.get("collectionNumber"),
        )

    def submit_storefront_order(self, store_id: int, payload: StorefrontOrderV1) -> OrderAccepted:
        data = self._request("POST", f"/store/{store_id}/orders", body=_dump(payload)) or {}
        order_id = data.get("id")
        return OrderAccepted(
            order_number=str(data.get("orderNumber") or order_id or ""),
            order_id=str(order_id) if order_id is not None else None,
        )

    def _request(self, method: str, path: str, body: dict | None = None) -> Any:
        url = f"{self.base_url}{path}"

        req = urllib.request.Request(url, method=method)
        req.add_header("Accept", "application/json")
        if self._token:
            req.add_header("Authorization", f"Bearer {self._token}")

        data = None
        if body is not None:
            req.add_header("Content-Type", "application/json")
            data = json.dumps(body).encode("utf-8")

        try:
            with urllib.request.urlopen(req, data=data, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            message = _error_message(e.read().decode("utf-8", errors="replace"), e.reason)
            logger.warning("backend %s %s -> %s %s", method, url, e.code, message)
            raise BackendRejectedError(e.code, message) from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            reason = getattr(e, "reason", None) or e
            logger.warning("backend %s %s failed: %s", method, url, reason)
            raise BackendUnavailableError(url, str(reason)) from e

        if not raw.strip():
            return None
        return json.loads(raw)


def _dump(payload: BaseModel) -> dict:
    return payload.model_dump(mode="json", by_alias=True, exclude_none=True)


def _error_message(raw: str, reason: object) -> str:
    try:
        body = json.loads(raw)
    except ValueError:
        return raw or str(reason or "")

    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or body.get("title") or body)
    return str(body)
