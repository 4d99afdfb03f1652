"""Shared event schema (v1).

The session service stores an append-only activity log. Clients can consume these events
to render a shift history.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EntityTypeV1(str, Enum):
    SESSION = "Session"
    ORDER = "Order"
    COLLECTION = "Collection"
    STOREFRONT_ORDER = "StorefrontOrder"


class EventTypeV1(str, Enum):
    SESSION_OPENED = "SESSION_OPENED"
    CUSTOMER_ATTACHED = "CUSTOMER_ATTACHED"
    CUSTOMER_DETACHED = "CUSTOMER_DETACHED"
    CART_CLEARED = "CART_CLEARED"
    ORDER_SUBMITTED = "ORDER_SUBMITTED"
    ORDER_FAILED = "ORDER_FAILED"
    COLLECTION_SUBMITTED = "COLLECTION_SUBMITTED"
    COLLECTION_FAILED = "COLLECTION_FAILED"
    STOREFRONT_ORDER_SUBMITTED = "STOREFRONT_ORDER_SUBMITTED"
    STOREFRONT_ORDER_FAILED = "STOREFRONT_ORDER_FAILED"


class EventV1(BaseModel):
    id: str
    session_id: str | None = None
    actor_id: str | None = None

    entity_type: EntityTypeV1
    entity_id: str

    event_type: EventTypeV1
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: str
